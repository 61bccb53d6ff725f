"""Typed failures raised by the board services.

Every error carries a stable machine-readable ``code`` so that the HTTP layer
(and any UI behind it) can explain the failure without parsing messages.
"""

from __future__ import annotations


class BoardError(RuntimeError):
    """Base exception for expected, caller-visible failures."""

    default_code = "BOARD_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def as_detail(self) -> dict[str, str]:
        """Return the error as a JSON-ready payload."""
        return {"code": self.code, "message": self.message}


class NotFoundError(BoardError):
    """Raised when a post, comment, user or engagement row does not exist."""

    default_code = "NOT_FOUND"


class ConflictError(BoardError):
    """Raised when an action collides with existing state.

    Duplicate votes/reports, edits outside the cooldown window and closed
    comment sections all surface through this class with a specific code.
    """

    default_code = "CONFLICT"


class PermissionDeniedError(BoardError):
    """Raised when the acting user does not own the content being changed."""

    default_code = "UNAUTHORIZED"
