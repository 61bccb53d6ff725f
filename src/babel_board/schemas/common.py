"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Machine-readable error payload returned under ``detail``."""

    code: str = Field(..., description="Stable error code, e.g. DUPLICATE_VOTE.")
    message: str = Field(..., description="Human-readable explanation.")


class MonthCount(BaseModel):
    """Number of visible posts created during one UTC month."""

    month: str = Field(..., description="Month in YYYY-MM form.")
    count: int
