"""Feed assembly: ranked, newest, category, per-user and monthly feeds.

The ranked feed ranks the whole eligible window once (optionally cached) and
slices pages out of it. All other feeds are time ordered and paginated with a
``(created_at, id)`` cursor. Per-user ``did_vote`` / ``did_report`` flags are
applied after slicing with one batched query per page and never cached.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from babel_board.core.errors import NotFoundError
from babel_board.core.settings import settings
from babel_board.models import Comment, Post, User
from babel_board.repositories.comment_repo import CommentRepository
from babel_board.repositories.post_repo import PostRepository
from babel_board.schemas.common import MonthCount
from babel_board.schemas.feed import CommentFeedPage, CursorFeedPage, RankedFeedPage, RankedPost
from babel_board.services.content import to_comment_summary, to_post_summary
from babel_board.services.engagement import EngagementRecorder
from babel_board.services.feed_cache import FeedCache, NullFeedCache, feed_cache_key
from babel_board.services.pagination import FeedCursor, parse_cursor, slice_cursor_page, slice_page
from babel_board.services.ranking import rank_posts

logger = logging.getLogger(__name__)

_RANKED_LIST = TypeAdapter(list[RankedPost])


class FeedService:
    """Builds every user-facing feed on top of the repositories."""

    def __init__(self, session: Session, cache: FeedCache | None = None) -> None:
        self.session = session
        self.cache = cache if cache is not None else NullFeedCache()
        self.posts = PostRepository(session)
        self.comments = CommentRepository(session)
        self.engagement = EngagementRecorder(session)

    # Ranked

    def get_ranked_feed(
        self,
        user_id: int | None = None,
        page_size: int | None = None,
        window_days: int | None = None,
        page: object = 1,
        *,
        now: datetime | None = None,
    ) -> RankedFeedPage:
        """Return one page of the hot feed.

        Ranks are global over the window, so page 2 starts at rank
        ``page_size + 1``.
        """
        size = page_size or settings.feed_page_size
        days = window_days or settings.ranked_window_days
        window = slice_page(self._drop_removed(self._ranked_window(days, now)), page, size)

        summaries = self._annotate_posts(user_id, [entry.post for entry in window.items])
        posts = [
            RankedPost(post=summary, rank=entry.rank)
            for summary, entry in zip(summaries, window.items)
        ]
        return RankedFeedPage(
            posts=posts,
            has_more=window.has_more,
            total_posts=window.total,
            page=window.page,
        )

    def _ranked_window(self, days: int, now: datetime | None) -> list[RankedPost]:
        key = feed_cache_key("ranked", days, settings.ranking_max_posts)
        cached = self.cache.get(key)
        if cached is not None:
            try:
                ranked = _RANKED_LIST.validate_json(cached)
            except ValidationError:
                logger.warning("Discarding unreadable cached feed %s", key)
            else:
                logger.debug("Ranked feed cache hit for %s", key)
                return ranked

        rows = self.posts.fetch_visible_in_window(days, settings.ranking_max_posts, now=now)
        authors = self.posts.authors_by_id([row.author_id for row in rows])
        ranked = [
            RankedPost(post=to_post_summary(entry.item, authors.get(entry.item.author_id)), rank=entry.rank)
            for entry in rank_posts(rows, now=now)
        ]
        logger.debug("Ranked %d posts from the last %d days", len(ranked), days)
        self.cache.set(key, _RANKED_LIST.dump_json(ranked).decode("utf-8"), settings.feed_cache_ttl_seconds)
        return ranked

    def _drop_removed(self, ranked: list[RankedPost]) -> list[RankedPost]:
        # A cached window can outlive a hide or a report past the threshold.
        visible = self.posts.visible_ids([entry.post.id for entry in ranked])
        if len(visible) == len(ranked):
            return ranked
        logger.debug("Dropping %d removed posts from the ranked window", len(ranked) - len(visible))
        survivors = [entry.post for entry in ranked if entry.post.id in visible]
        return [RankedPost(post=post, rank=rank) for rank, post in enumerate(survivors, start=1)]

    # Time-ordered post feeds

    def get_newest_feed(
        self,
        user_id: int | None = None,
        page_size: int | None = None,
        window_days: int | None = None,
        cursor: str | FeedCursor | None = None,
        *,
        now: datetime | None = None,
    ) -> CursorFeedPage:
        """Return visible posts of the window, newest first."""
        size = page_size or settings.feed_page_size
        days = window_days or settings.newest_window_days
        rows = self.posts.fetch_visible_in_window(days, size + 1, parse_cursor(cursor), now=now)
        return self._post_page(user_id, rows, size)

    def get_prefix_feed(
        self,
        prefix: str,
        user_id: int | None = None,
        page_size: int | None = None,
        window_days: int | None = None,
        cursor: str | FeedCursor | None = None,
        *,
        now: datetime | None = None,
    ) -> CursorFeedPage:
        """Return visible posts whose title starts with ``prefix``, alef-tolerant."""
        size = page_size or settings.feed_page_size
        days = window_days or settings.prefix_window_days
        rows = self.posts.fetch_visible_by_prefix(prefix, days, size + 1, parse_cursor(cursor), now=now)
        return self._post_page(user_id, rows, size)

    def get_ask_feed(
        self,
        user_id: int | None = None,
        page_size: int | None = None,
        cursor: str | FeedCursor | None = None,
    ) -> CursorFeedPage:
        return self.get_prefix_feed(settings.ask_title_prefix, user_id, page_size, cursor=cursor)

    def get_share_feed(
        self,
        user_id: int | None = None,
        page_size: int | None = None,
        cursor: str | FeedCursor | None = None,
    ) -> CursorFeedPage:
        return self.get_prefix_feed(settings.share_title_prefix, user_id, page_size, cursor=cursor)

    def get_user_posts(
        self,
        username: str,
        user_id: int | None = None,
        page_size: int | None = None,
        cursor: str | FeedCursor | None = None,
    ) -> CursorFeedPage:
        """Return the visible posts written by ``username``."""
        self._require_username(username)
        size = page_size or settings.feed_page_size
        rows = self.posts.fetch_visible_by_author(username, size + 1, parse_cursor(cursor))
        return self._post_page(user_id, rows, size)

    def get_past_months(self) -> list[MonthCount]:
        """Return the months that have visible posts, newest first."""
        return [MonthCount(month=month, count=count) for month, count in self.posts.available_months()]

    def get_month_feed(
        self,
        month: str,
        user_id: int | None = None,
        page_size: int | None = None,
        cursor: str | FeedCursor | None = None,
    ) -> CursorFeedPage:
        """Return visible posts of a ``YYYY-MM`` month; a bad month yields nothing."""
        size = page_size or settings.feed_page_size
        rows = self.posts.fetch_visible_by_month(month, size + 1, parse_cursor(cursor))
        return self._post_page(user_id, rows, size)

    # Comment feeds

    def get_new_comments(
        self,
        user_id: int | None = None,
        page_size: int | None = None,
        cursor: str | FeedCursor | None = None,
    ) -> CommentFeedPage:
        size = page_size or settings.feed_page_size
        rows = self.comments.fetch_visible_newest(size + 1, parse_cursor(cursor))
        return self._comment_page(user_id, rows, size)

    def get_user_comments(
        self,
        username: str,
        user_id: int | None = None,
        page_size: int | None = None,
        cursor: str | FeedCursor | None = None,
    ) -> CommentFeedPage:
        self._require_username(username)
        size = page_size or settings.feed_page_size
        rows = self.comments.fetch_visible_by_author(username, size + 1, parse_cursor(cursor))
        return self._comment_page(user_id, rows, size)

    # Helpers

    def _require_username(self, username: str) -> None:
        if self.session.query(User.id).filter(User.username == username).first() is None:
            raise NotFoundError(f"User {username} not found", code="USER_NOT_FOUND")

    def _post_page(self, user_id: int | None, rows: Sequence[Post], size: int) -> CursorFeedPage:
        page = slice_cursor_page(rows, size)
        authors = self.posts.authors_by_id([row.author_id for row in page.items])
        summaries = self._annotate_posts(
            user_id,
            [to_post_summary(row, authors.get(row.author_id)) for row in page.items],
        )
        return CursorFeedPage(
            posts=summaries,
            has_more=page.has_more,
            next_cursor=page.next_cursor.encode() if page.next_cursor else None,
        )

    def _annotate_posts(self, user_id, summaries):
        if user_id is None or not summaries:
            return summaries
        ids = [summary.id for summary in summaries]
        voted = self.engagement.voted_post_ids(user_id, ids)
        reported = self.engagement.reported_post_ids(user_id, ids)
        return [
            summary.model_copy(update={"did_vote": summary.id in voted, "did_report": summary.id in reported})
            for summary in summaries
        ]

    def _comment_page(self, user_id: int | None, rows: Sequence[Comment], size: int) -> CommentFeedPage:
        page = slice_cursor_page(rows, size)
        items = page.items
        authors = self.posts.authors_by_id([row.author_id for row in items])
        titles = self.comments.post_titles(row.post_id for row in items)
        parents = self.comments.texts(row.parent_id for row in items if row.parent_id is not None)
        ids = [row.id for row in items]
        voted = self.engagement.voted_comment_ids(user_id, ids)
        reported = self.engagement.reported_comment_ids(user_id, ids)

        comments = [
            to_comment_summary(
                row,
                authors.get(row.author_id),
                post_title=titles.get(row.post_id),
                parent_text=parents.get(row.parent_id) if row.parent_id is not None else None,
                did_vote=row.id in voted,
                did_report=row.id in reported,
            )
            for row in items
        ]
        return CommentFeedPage(
            comments=comments,
            has_more=page.has_more,
            next_cursor=page.next_cursor.encode() if page.next_cursor else None,
        )
