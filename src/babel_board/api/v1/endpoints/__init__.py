# src/babel_board/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .feed import router as feed_router
from .posts import router as posts_router
from .reports import router as reports_router
from .system import router as system_router
from .votes import router as votes_router

__all__ = [
    "comments_router",
    "feed_router",
    "posts_router",
    "reports_router",
    "system_router",
    "votes_router",
]
