"""System endpoints for the Babel Board API."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from babel_board.core.settings import settings

from ..dependencies import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "moderation": {
            "report_threshold": settings.report_threshold,
            "max_comments_per_post": settings.max_comments_per_post,
            "edit_cooldown_minutes": settings.edit_cooldown_minutes,
        },
        "feeds": {
            "page_size": settings.feed_page_size,
            "ranked_window_days": settings.ranked_window_days,
            "ranking_max_posts": settings.ranking_max_posts,
            "newest_window_days": settings.newest_window_days,
            "cache_backend": settings.feed_cache_backend,
            "cache_ttl_seconds": settings.feed_cache_ttl_seconds,
        },
    }


@router.get("/health")
async def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check including database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        db_status = f"unhealthy: {exc}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {"database": db_status},
        "version": settings.app_version,
    }
