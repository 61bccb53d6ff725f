# src/babel_board/api/v1/endpoints/feed.py
"""Feed endpoints for listing posts and comments in various orders."""

from __future__ import annotations

from fastapi import APIRouter, Query

from babel_board.schemas.common import MonthCount
from babel_board.schemas.feed import CommentFeedPage, CursorFeedPage, RankedFeedPage
from babel_board.services.feed import FeedService

from ..dependencies import FeedCacheDep, OptionalUserDep, SessionDep

router = APIRouter(tags=["feed"])

# Malformed page/cursor values are recovered by the service, so they are
# accepted here as raw strings.
PageQuery = Query(None, description="1-based page number")
CursorQuery = Query(None, description="Opaque cursor from a previous page")


def _user_id(user) -> int | None:
    return user.id if user is not None else None


@router.get("/feed/ranked", response_model=RankedFeedPage)
async def get_ranked_feed(
    db: SessionDep,
    cache: FeedCacheDep,
    user: OptionalUserDep,
    page: str | None = PageQuery,
) -> RankedFeedPage:
    """Return one page of the decay-ranked feed."""
    return FeedService(db, cache).get_ranked_feed(_user_id(user), page=page)


@router.get("/feed/newest", response_model=CursorFeedPage)
async def get_newest_feed(
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CursorFeedPage:
    """Return the newest visible posts."""
    return FeedService(db).get_newest_feed(_user_id(user), cursor=cursor)


@router.get("/feed/ask", response_model=CursorFeedPage)
async def get_ask_feed(
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CursorFeedPage:
    return FeedService(db).get_ask_feed(_user_id(user), cursor=cursor)


@router.get("/feed/share", response_model=CursorFeedPage)
async def get_share_feed(
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CursorFeedPage:
    return FeedService(db).get_share_feed(_user_id(user), cursor=cursor)


@router.get("/feed/users/{username}", response_model=CursorFeedPage)
async def get_user_posts(
    username: str,
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CursorFeedPage:
    """Return the visible posts written by ``username``."""
    return FeedService(db).get_user_posts(username, _user_id(user), cursor=cursor)


@router.get("/feed/months", response_model=list[MonthCount])
async def get_past_months(db: SessionDep) -> list[MonthCount]:
    """List months that have visible posts, newest first."""
    return FeedService(db).get_past_months()


@router.get("/feed/months/{month}", response_model=CursorFeedPage)
async def get_month_feed(
    month: str,
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CursorFeedPage:
    return FeedService(db).get_month_feed(month, _user_id(user), cursor=cursor)


@router.get("/comments/new", response_model=CommentFeedPage)
async def get_new_comments(
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CommentFeedPage:
    """Return the newest visible comments across the board."""
    return FeedService(db).get_new_comments(_user_id(user), cursor=cursor)


@router.get("/comments/users/{username}", response_model=CommentFeedPage)
async def get_user_comments(
    username: str,
    db: SessionDep,
    user: OptionalUserDep,
    cursor: str | None = CursorQuery,
) -> CommentFeedPage:
    return FeedService(db).get_user_comments(username, _user_id(user), cursor=cursor)
