"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    feed_router,
    posts_router,
    reports_router,
    system_router,
    votes_router,
)

__all__ = [
    "comments_router",
    "feed_router",
    "posts_router",
    "reports_router",
    "system_router",
    "votes_router",
]
