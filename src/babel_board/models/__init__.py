# src/babel_board/models/__init__.py
"""SQLAlchemy models for the Babel Board application."""

from .comment import Comment
from .post import Post
from .report import Report
from .user import ROLE_MODERATOR, ROLE_USER, User, UserStanding
from .vote import Vote

__all__ = [
    "Comment",
    "Post",
    "Report",
    "ROLE_MODERATOR", "ROLE_USER",
    "User", "UserStanding",
    "Vote",
]
