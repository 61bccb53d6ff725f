"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_COMMENT_TEXT_LENGTH = 512

DELETED_PLACEHOLDER = "[deleted]"


class CommentCreate(BaseModel):
    """Schema for replying to a post or to another comment."""

    post_id: int
    parent_id: int | None = Field(None, description="Comment being replied to")
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_TEXT_LENGTH)

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("text must not be blank")
        return stripped


class CommentUpdate(BaseModel):
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_TEXT_LENGTH)


class CommentSummary(BaseModel):
    """Comment as shown in comment feeds, with its surrounding context."""

    id: int
    post_id: int
    parent_id: int | None
    author_id: int
    author_username: str | None = None
    text: str
    votes: int
    created_at: datetime
    updated_at: datetime
    post_title: str | None = None
    parent_text: str | None = None
    did_vote: bool = False
    did_report: bool = False

    model_config = ConfigDict(from_attributes=True)


class ThreadComment(BaseModel):
    """Entry of a post's comment thread.

    ``deleted`` entries are placeholders for hidden comments that still have
    visible replies; their author and text are withheld.
    """

    id: int
    parent_id: int | None
    author_id: int | None
    author_username: str | None
    text: str
    votes: int
    created_at: datetime
    deleted: bool = False
    did_vote: bool = False
    did_report: bool = False
