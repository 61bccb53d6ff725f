# src/babel_board/main.py
"""Main entry point for the Babel Board application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from babel_board.api.v1 import (
    comments_router,
    feed_router,
    posts_router,
    reports_router,
    system_router,
    votes_router,
)
from babel_board.core.errors import (
    BoardError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from babel_board.core.settings import settings

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Babel Board API",
    description="Discussion board with decay-ranked feeds",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(feed_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")

_STATUS_BY_ERROR: list[tuple[type[BoardError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
]


def status_for(exc: BoardError) -> int:
    """Return the HTTP status code for a service error."""
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError) -> JSONResponse:
    """Translate service errors into ``{"detail": {"code", "message"}}`` responses."""
    status_code = status_for(exc)
    logger.info(
        "%s %s rejected with %s (%s)",
        request.method,
        request.url.path,
        exc.code,
        status_code,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.as_detail()})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("babel_board.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
