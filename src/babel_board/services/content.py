"""Service-level helpers for the post and comment lifecycle.

Creation checks the author's standing, edits are limited to the author and
to the edit cooldown, and removal is a soft delete available to the author or
a moderator. Every change that affects a denormalized counter goes through
``CounterStore``.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from babel_board.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from babel_board.core.settings import settings
from babel_board.db.time import as_utc, utcnow
from babel_board.models import Comment, Post
from babel_board.repositories.comment_repo import CommentRepository
from babel_board.repositories.counter_store import CounterStore
from babel_board.repositories.post_repo import PostRepository
from babel_board.schemas.comment import DELETED_PLACEHOLDER, CommentSummary, ThreadComment
from babel_board.schemas.post import PostDetail, PostSummary
from babel_board.services.engagement import EngagementRecorder
from babel_board.services.standing import ensure_can_post, is_moderator
from babel_board.services.targets import PostTarget
from babel_board.services.visibility import is_visible

logger = logging.getLogger(__name__)

_UNSET = object()


def to_post_summary(
    post: Post,
    author_username: str | None = None,
    *,
    did_vote: bool = False,
    did_report: bool = False,
) -> PostSummary:
    """Convert a Post ORM instance to an API schema."""
    return PostSummary(
        id=post.id,
        title=post.title,
        url=post.url,
        text=post.text,
        author_id=post.author_id,
        author_username=author_username,
        votes=post.votes,
        comment_count=post.comment_count,
        created_at=as_utc(post.created_at),
        updated_at=as_utc(post.updated_at),
        did_vote=did_vote,
        did_report=did_report,
    )


def to_comment_summary(
    comment: Comment,
    author_username: str | None = None,
    *,
    post_title: str | None = None,
    parent_text: str | None = None,
    did_vote: bool = False,
    did_report: bool = False,
) -> CommentSummary:
    """Convert a Comment ORM instance to an API schema."""
    return CommentSummary(
        id=comment.id,
        post_id=comment.post_id,
        parent_id=comment.parent_id,
        author_id=comment.author_id,
        author_username=author_username,
        text=comment.text,
        votes=comment.votes,
        created_at=as_utc(comment.created_at),
        updated_at=as_utc(comment.updated_at),
        post_title=post_title,
        parent_text=parent_text,
        did_vote=did_vote,
        did_report=did_report,
    )


def _post_not_found(post_id: int) -> NotFoundError:
    return NotFoundError(f"Post {post_id} not found", code="POST_NOT_FOUND")


def _comment_not_found(comment_id: int) -> NotFoundError:
    return NotFoundError(f"Comment {comment_id} not found", code="COMMENT_NOT_FOUND")


def _ensure_editable(author_id: int, user_id: int, created_at) -> None:
    if author_id != user_id:
        raise PermissionDeniedError("Only the author can edit this item")
    deadline = as_utc(created_at) + timedelta(minutes=settings.edit_cooldown_minutes)
    if utcnow() > deadline:
        raise ConflictError(
            f"Edits are only allowed within {settings.edit_cooldown_minutes} minutes",
            code="EDIT_COOLDOWN_EXPIRED",
        )


def _ensure_removable(db: Session, author_id: int, user_id: int) -> None:
    if author_id != user_id and not is_moderator(db, user_id):
        raise PermissionDeniedError("Only the author or a moderator can delete this item")


# Posts


def create_post(
    db: Session,
    *,
    author_id: int,
    title: str,
    url: str | None = None,
    text: str | None = None,
) -> Post:
    """Create a post for ``author_id``.

    Raises:
        NotFoundError: If the author does not exist.
        ConflictError: If the author is banned or muted.
    """
    ensure_can_post(db, author_id)
    post = PostRepository(db).create(author_id=author_id, title=title, url=url, text=text)
    logger.info("User %s created post %s", author_id, post.id)
    return post


def edit_post(
    db: Session,
    *,
    post_id: int,
    user_id: int,
    title: str | None = None,
    url: object = _UNSET,
    text: object = _UNSET,
) -> Post:
    """Update a post's title, url or text.

    ``url`` and ``text`` may be set to None to clear them; leaving them out
    keeps the stored value.
    """
    post = PostRepository(db).get_visible(post_id)
    if post is None:
        raise _post_not_found(post_id)
    _ensure_editable(post.author_id, user_id, post.created_at)

    if title is not None:
        post.title = title
    if url is not _UNSET:
        post.url = url  # type: ignore[assignment]
    if text is not _UNSET:
        post.text = text  # type: ignore[assignment]
    post.updated_at = utcnow()
    db.flush()
    logger.info("User %s edited post %s", user_id, post_id)
    return post


def hide_post(db: Session, *, post_id: int, user_id: int) -> Post:
    """Soft-delete a post. Its comments stay in place."""
    post = PostRepository(db).get_by_id(post_id)
    if post is None or post.hidden:
        raise _post_not_found(post_id)
    _ensure_removable(db, post.author_id, user_id)

    post.hidden = True
    post.updated_at = utcnow()
    db.flush()
    logger.info("User %s hid post %s", user_id, post_id)
    return post


# Comments


def create_comment(
    db: Session,
    *,
    post_id: int,
    author_id: int,
    text: str,
    parent_id: int | None = None,
) -> Comment:
    """Add a comment to a post and bump the post's comment count.

    Raises:
        NotFoundError: If the post, or the parent comment within that post,
            does not exist.
        ConflictError: ``POST_HIDDEN`` for removed posts, ``COMMENTS_CLOSED``
            once the post reached the comment cap, ``USER_BANNED`` or
            ``USER_MUTED`` for restricted authors.
    """
    ensure_can_post(db, author_id)
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise _post_not_found(post_id)
    if not is_visible(post):
        raise ConflictError("Comments are not accepted on removed posts", code="POST_HIDDEN")

    comments = CommentRepository(db)
    if parent_id is not None:
        parent = comments.get_by_id(parent_id)
        if parent is None or parent.post_id != post_id:
            raise _comment_not_found(parent_id)

    if post.comment_count >= settings.max_comments_per_post:
        raise ConflictError(
            f"This post reached the limit of {settings.max_comments_per_post} comments",
            code="COMMENTS_CLOSED",
        )

    comment = comments.create(post_id=post_id, author_id=author_id, text=text, parent_id=parent_id)
    CounterStore(db).increment(PostTarget(post_id), "comment_count", 1)
    logger.info("User %s commented %s on post %s", author_id, comment.id, post_id)
    return comment


def edit_comment(db: Session, *, comment_id: int, user_id: int, text: str) -> Comment:
    comment = CommentRepository(db).get_by_id(comment_id)
    if comment is None or not is_visible(comment):
        raise _comment_not_found(comment_id)
    _ensure_editable(comment.author_id, user_id, comment.created_at)

    comment.text = text
    comment.updated_at = utcnow()
    db.flush()
    logger.info("User %s edited comment %s", user_id, comment_id)
    return comment


def hide_comment(db: Session, *, comment_id: int, user_id: int) -> Comment:
    """Soft-delete a comment and release its slot in the post's comment count."""
    comment = CommentRepository(db).get_by_id(comment_id)
    if comment is None or comment.hidden:
        raise _comment_not_found(comment_id)
    _ensure_removable(db, comment.author_id, user_id)

    comment.hidden = True
    comment.updated_at = utcnow()
    db.flush()
    CounterStore(db).increment(PostTarget(comment.post_id), "comment_count", -1)
    logger.info("User %s hid comment %s", user_id, comment_id)
    return comment


# Reading


def build_thread(
    comments: list[Comment],
    authors: dict[int, str],
    voted: set[int] | None = None,
    reported: set[int] | None = None,
) -> list[ThreadComment]:
    """Return the visible part of a thread, oldest first.

    Hidden comments are kept as placeholders only when at least one of their
    descendants is visible, so replies never lose their parent.
    """
    voted = voted or set()
    reported = reported or set()

    # Replies always sort after their parent, so walking backwards sees every
    # descendant before its ancestors.
    needed: set[int] = set()
    keep: set[int] = set()
    for comment in reversed(comments):
        if is_visible(comment) or comment.id in needed:
            keep.add(comment.id)
            if comment.parent_id is not None:
                needed.add(comment.parent_id)

    thread: list[ThreadComment] = []
    for comment in comments:
        if comment.id not in keep:
            continue
        if is_visible(comment):
            thread.append(
                ThreadComment(
                    id=comment.id,
                    parent_id=comment.parent_id,
                    author_id=comment.author_id,
                    author_username=authors.get(comment.author_id),
                    text=comment.text,
                    votes=comment.votes,
                    created_at=as_utc(comment.created_at),
                    did_vote=comment.id in voted,
                    did_report=comment.id in reported,
                )
            )
        else:
            thread.append(
                ThreadComment(
                    id=comment.id,
                    parent_id=comment.parent_id,
                    author_id=None,
                    author_username=None,
                    text=DELETED_PLACEHOLDER,
                    votes=0,
                    created_at=as_utc(comment.created_at),
                    deleted=True,
                )
            )
    return thread


def get_post_with_thread(db: Session, post_id: int, user_id: int | None = None) -> PostDetail:
    """Return a visible post and its comment thread, annotated for ``user_id``."""
    posts = PostRepository(db)
    post = posts.get_visible(post_id)
    if post is None:
        raise _post_not_found(post_id)

    comments = CommentRepository(db).list_for_post(post_id)
    authors = posts.authors_by_id([post.author_id, *(c.author_id for c in comments)])
    engagement = EngagementRecorder(db)
    comment_ids = [c.id for c in comments]
    thread = build_thread(
        comments,
        authors,
        voted=engagement.voted_comment_ids(user_id, comment_ids),
        reported=engagement.reported_comment_ids(user_id, comment_ids),
    )

    summary = to_post_summary(
        post,
        authors.get(post.author_id),
        did_vote=bool(engagement.voted_post_ids(user_id, [post.id])),
        did_report=bool(engagement.reported_post_ids(user_id, [post.id])),
    )
    return PostDetail(**summary.model_dump(), comments=thread)
