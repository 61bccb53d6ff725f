"""Vote and report request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class TargetRequest(BaseModel):
    """Names exactly one post or one comment."""

    post_id: int | None = Field(None, ge=1)
    comment_id: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def _exactly_one_target(self) -> TargetRequest:
        if (self.post_id is None) == (self.comment_id is None):
            raise ValueError("exactly one of post_id or comment_id is required")
        return self


class VoteRequest(TargetRequest):
    """Schema for casting or retracting an upvote."""


class ReportRequest(TargetRequest):
    """Schema for filing or withdrawing a report."""

    reason: str | None = Field(None, max_length=512)


class VoteResponse(BaseModel):
    post_id: int | None
    comment_id: int | None
    votes: int
    voted: bool


class ReportResponse(BaseModel):
    post_id: int | None
    comment_id: int | None
    report_count: int
    reported: bool
