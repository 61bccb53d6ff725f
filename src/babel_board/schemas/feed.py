"""Response envelopes for ranked and time-ordered feeds."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .comment import CommentSummary
from .post import PostSummary


class RankedPost(BaseModel):
    """A post with its 1-based position in the full ranking."""

    post: PostSummary
    rank: int = Field(..., ge=1)


class RankedFeedPage(BaseModel):
    posts: list[RankedPost]
    has_more: bool
    total_posts: int
    page: int = 1


class CursorFeedPage(BaseModel):
    """Page of a time-ordered post feed.

    Pass ``next_cursor`` back as ``cursor`` to continue.
    """

    posts: list[PostSummary]
    has_more: bool
    next_cursor: str | None = None


class CommentFeedPage(BaseModel):
    comments: list[CommentSummary]
    has_more: bool
    next_cursor: str | None = None
