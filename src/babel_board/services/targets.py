"""Tagged references to the content a vote or report points at."""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypeAlias

from babel_board.core.errors import BoardError
from babel_board.models import Comment, Post


@dataclass(frozen=True, slots=True)
class PostTarget:
    """Engagement aimed at a post."""

    id: int
    kind: ClassVar[str] = "post"

    @property
    def model(self) -> type[Post]:
        return Post


@dataclass(frozen=True, slots=True)
class CommentTarget:
    """Engagement aimed at a comment."""

    id: int
    kind: ClassVar[str] = "comment"

    @property
    def model(self) -> type[Comment]:
        return Comment


Target: TypeAlias = PostTarget | CommentTarget


def target_from_ids(post_id: int | None, comment_id: int | None) -> Target:
    """Build a target from a pair of optional ids, exactly one of which is set.

    Raises:
        BoardError: With code ``INVALID_TARGET`` when both or neither id is given.
    """
    if (post_id is None) == (comment_id is None):
        raise BoardError(
            "Exactly one of post_id or comment_id must be provided",
            code="INVALID_TARGET",
        )
    if post_id is not None:
        return PostTarget(post_id)
    return CommentTarget(comment_id)  # type: ignore[arg-type]


def target_columns(target: Target) -> dict[str, int | None]:
    """Return the ``post_id``/``comment_id`` column values for ``target``."""
    if isinstance(target, PostTarget):
        return {"post_id": target.id, "comment_id": None}
    return {"post_id": None, "comment_id": target.id}
