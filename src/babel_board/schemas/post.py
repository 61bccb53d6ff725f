"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .comment import ThreadComment

MAX_TITLE_LENGTH = 300
MAX_URL_LENGTH = 2048
MAX_POST_TEXT_LENGTH = 10000


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class PostCreate(BaseModel):
    """Schema for submitting a new post."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    url: str | None = Field(None, max_length=MAX_URL_LENGTH, description="Optional link")
    text: str | None = Field(None, max_length=MAX_POST_TEXT_LENGTH, description="Optional body")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    @field_validator("url", "text")
    @classmethod
    def _normalise_optional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class PostUpdate(BaseModel):
    """Partial update of a post; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    url: str | None = Field(None, max_length=MAX_URL_LENGTH)
    text: str | None = Field(None, max_length=MAX_POST_TEXT_LENGTH)


class PostSummary(BaseModel):
    """Post as shown in feeds."""

    id: int
    title: str
    url: str | None
    text: str | None
    author_id: int
    author_username: str | None = None
    votes: int
    comment_count: int
    created_at: datetime
    updated_at: datetime
    did_vote: bool = False
    did_report: bool = False

    model_config = ConfigDict(from_attributes=True)


class PostDetail(PostSummary):
    """Single post together with its comment thread."""

    comments: list[ThreadComment] = Field(default_factory=list)
