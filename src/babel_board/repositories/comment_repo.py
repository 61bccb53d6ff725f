"""Data access helpers for working with comments."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from babel_board.models import Comment, Post, User
from babel_board.services.pagination import FeedCursor, older_than
from babel_board.services.visibility import visible_clause

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comment entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: int) -> Comment | None:
        """Return a comment by identifier regardless of visibility."""
        return self.session.get(Comment, comment_id)

    def create(
        self,
        *,
        post_id: int,
        author_id: int,
        text: str,
        parent_id: int | None = None,
    ) -> Comment:
        """Insert a new comment with zeroed counters and return it."""
        comment = Comment(
            post_id=post_id,
            parent_id=parent_id,
            author_id=author_id,
            text=text,
            votes=0,
            report_count=0,
        )
        self.session.add(comment)
        self.session.flush()
        return comment

    def list_for_post(self, post_id: int) -> list[Comment]:
        """Return every comment of a post, hidden ones included, oldest first.

        Hidden rows are needed to render placeholders for deleted parents.
        """
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(self.session.execute(stmt).scalars())

    def fetch_visible_newest(self, limit: int, cursor: FeedCursor | None = None) -> list[Comment]:
        """Return the newest visible comments across the board."""
        return self._page(select(Comment).where(visible_clause(Comment)), limit, cursor)

    def fetch_visible_by_author(
        self,
        username: str,
        limit: int,
        cursor: FeedCursor | None = None,
    ) -> list[Comment]:
        """Return visible comments written by ``username``."""
        stmt = (
            select(Comment)
            .join(User, User.id == Comment.author_id)
            .where(User.username == username, visible_clause(Comment))
        )
        return self._page(stmt, limit, cursor)

    def post_titles(self, post_ids: Iterable[int]) -> dict[int, str]:
        """Return ``{post_id: title}`` for visible posts only."""
        ids = set(post_ids)
        if not ids:
            return {}
        stmt = select(Post.id, Post.title).where(Post.id.in_(ids), visible_clause(Post))
        return {post_id: title for post_id, title in self.session.execute(stmt)}

    def texts(self, comment_ids: Iterable[int]) -> dict[int, str]:
        """Return ``{comment_id: text}`` for visible comments only."""
        ids = set(comment_ids)
        if not ids:
            return {}
        stmt = select(Comment.id, Comment.text).where(
            Comment.id.in_(ids),
            visible_clause(Comment),
        )
        return {comment_id: text for comment_id, text in self.session.execute(stmt)}

    def _page(self, stmt, limit: int, cursor: FeedCursor | None) -> list[Comment]:
        if cursor is not None:
            stmt = stmt.where(older_than(Comment, cursor))
        stmt = stmt.order_by(Comment.created_at.desc(), Comment.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())
