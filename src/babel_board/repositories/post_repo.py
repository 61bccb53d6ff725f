"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from sqlalchemy import extract, func, or_, select
from sqlalchemy.orm import Session

from babel_board.db.time import utcnow
from babel_board.models import Post, User
from babel_board.services.pagination import FeedCursor, older_than
from babel_board.services.title_prefix import alef_variants
from babel_board.services.visibility import visible_clause

__all__ = ["PostRepository", "month_bounds"]


def month_bounds(month: str) -> tuple[datetime, datetime] | None:
    """Return the UTC ``[start, end)`` range of a ``YYYY-MM`` month, or None."""
    year_part, _, month_part = month.partition("-")
    try:
        year, month_number = int(year_part), int(month_part)
        start = datetime(year, month_number, 1, tzinfo=UTC)
        if month_number == 12:
            end = datetime(year + 1, 1, 1, tzinfo=UTC)
        else:
            end = datetime(year, month_number + 1, 1, tzinfo=UTC)
    except ValueError:
        return None
    return start, end


class PostRepository:
    """Thin wrapper around database access for post entities.

    Every ``fetch_visible_*`` query applies the visibility predicate and
    orders by ``created_at DESC, id DESC``.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier regardless of visibility."""
        return self.session.get(Post, post_id)

    def get_visible(self, post_id: int) -> Post | None:
        """Return a post only if it may be shown to end users."""
        stmt = select(Post).where(Post.id == post_id, visible_clause(Post))
        return self.session.execute(stmt).scalars().first()

    def create(
        self,
        *,
        author_id: int,
        title: str,
        url: str | None,
        text: str | None,
    ) -> Post:
        """Insert a new post with zeroed counters and return it."""
        post = Post(
            author_id=author_id,
            title=title,
            url=url,
            text=text,
            votes=0,
            comment_count=0,
            report_count=0,
        )
        self.session.add(post)
        self.session.flush()
        return post

    def fetch_visible_in_window(
        self,
        days: int,
        limit: int,
        cursor: FeedCursor | None = None,
        *,
        now: datetime | None = None,
    ) -> list[Post]:
        """Return visible posts created within the last ``days`` days."""
        since = (now or utcnow()) - timedelta(days=days)
        stmt = self._visible().where(Post.created_at > since)
        return self._page(stmt, limit, cursor)

    def fetch_visible_by_prefix(
        self,
        prefix: str,
        days: int,
        limit: int,
        cursor: FeedCursor | None = None,
        *,
        now: datetime | None = None,
    ) -> list[Post]:
        """Return visible posts in the window whose title starts with ``prefix``.

        Alef glyph variants of the prefix all match.
        """
        since = (now or utcnow()) - timedelta(days=days)
        patterns = [
            Post.title.startswith(variant, autoescape=True)
            for variant in alef_variants(prefix)
        ]
        stmt = self._visible().where(Post.created_at > since, or_(*patterns))
        return self._page(stmt, limit, cursor)

    def fetch_visible_by_author(
        self,
        username: str,
        limit: int,
        cursor: FeedCursor | None = None,
    ) -> list[Post]:
        """Return visible posts written by ``username``."""
        stmt = (
            self._visible()
            .join(User, User.id == Post.author_id)
            .where(User.username == username)
        )
        return self._page(stmt, limit, cursor)

    def fetch_visible_by_month(
        self,
        month: str,
        limit: int,
        cursor: FeedCursor | None = None,
    ) -> list[Post]:
        """Return visible posts created during the UTC month ``YYYY-MM``."""
        bounds = month_bounds(month)
        if bounds is None:
            return []
        start, end = bounds
        stmt = self._visible().where(Post.created_at >= start, Post.created_at < end)
        return self._page(stmt, limit, cursor)

    def available_months(self) -> list[tuple[str, int]]:
        """Return ``(YYYY-MM, visible post count)`` pairs, newest month first."""
        year = extract("year", Post.created_at)
        month = extract("month", Post.created_at)
        stmt = (
            select(year, month, func.count(Post.id))
            .where(visible_clause(Post))
            .group_by(year, month)
            .order_by(year.desc(), month.desc())
        )
        rows = self.session.execute(stmt).all()
        return [(f"{int(y):04d}-{int(m):02d}", int(count)) for y, m, count in rows]

    def _visible(self):
        return select(Post).where(visible_clause(Post))

    def _page(self, stmt, limit: int, cursor: FeedCursor | None) -> list[Post]:
        if cursor is not None:
            stmt = stmt.where(older_than(Post, cursor))
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def authors_by_id(self, author_ids: Sequence[int]) -> dict[int, str]:
        """Return a ``{user_id: username}`` map for the given authors."""
        if not author_ids:
            return {}
        stmt = select(User.id, User.username).where(User.id.in_(set(author_ids)))
        return {user_id: username for user_id, username in self.session.execute(stmt)}
    def visible_ids(self, post_ids: Sequence[int]) -> set[int]:
        """Return the subset of ``post_ids`` that is still visible."""
        if not post_ids:
            return set()
        stmt = select(Post.id).where(Post.id.in_(set(post_ids)), visible_clause(Post))
        return set(self.session.execute(stmt).scalars())
