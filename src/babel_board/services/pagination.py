"""Page-number and cursor pagination over feed sequences.

Ranked feeds are paginated by page number over one precomputed ranking.
Time-ordered feeds use a ``(created_at, id)`` cursor naming the last row the
caller has seen; the storage query returns rows strictly older than it under
``created_at DESC, id DESC`` ordering.

Malformed page numbers and cursors never raise: they fall back to the first
page.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, and_, or_

from babel_board.db.time import as_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CURSOR_SEPARATOR = "|"


@dataclass(frozen=True)
class FeedCursor:
    """Position of the last item returned by a time-ordered feed."""

    created_at: datetime
    id: int | None = None

    def encode(self) -> str:
        """Return the opaque token handed back to clients.

        The timestamp is written in the ``Z`` form so the token survives an
        unencoded query string.
        """
        stamp = as_utc(self.created_at).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        if self.id is None:
            return stamp
        return f"{stamp}{_CURSOR_SEPARATOR}{self.id}"

    @classmethod
    def for_row(cls, row: Any) -> FeedCursor:
        """Build the cursor pointing at ``row``."""
        return cls(created_at=as_utc(row.created_at), id=row.id)


@dataclass(frozen=True)
class PageSlice(Generic[T]):
    """One page cut from a fully ranked sequence."""

    items: list[T]
    has_more: bool
    total: int
    page: int


@dataclass(frozen=True)
class CursorSlice(Generic[T]):
    """One page of a time-ordered feed."""

    items: list[T]
    has_more: bool
    next_cursor: FeedCursor | None


def parse_page(raw: Any) -> int:
    """Return a 1-based page number, falling back to 1 for bad input."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        if raw is not None:
            logger.warning("Ignoring malformed page number %r", raw)
        return 1
    return page if page >= 1 else 1


def parse_cursor(raw: str | FeedCursor | None) -> FeedCursor | None:
    """Decode a cursor token; unparseable tokens mean "start from the top".

    Accepts both ``<iso timestamp>`` and ``<iso timestamp>|<id>`` forms.
    """
    if raw is None or isinstance(raw, FeedCursor):
        return raw
    token = raw.strip()
    if not token:
        return None

    stamp, _, id_part = token.partition(_CURSOR_SEPARATOR)
    try:
        created_at = as_utc(datetime.fromisoformat(stamp))
        row_id = int(id_part) if id_part else None
    except ValueError:
        logger.warning("Ignoring malformed feed cursor %r", raw)
        return None
    return FeedCursor(created_at=created_at, id=row_id)


def older_than(model: Any, cursor: FeedCursor) -> ColumnElement[bool]:
    """Return the SQL filter selecting rows strictly after ``cursor`` in feed order."""
    if cursor.id is None:
        return model.created_at < cursor.created_at
    return or_(
        model.created_at < cursor.created_at,
        and_(model.created_at == cursor.created_at, model.id < cursor.id),
    )


def slice_page(items: Sequence[T], page: Any, page_size: int) -> PageSlice[T]:
    """Cut page ``page`` out of the full ranked sequence ``items``."""
    number = parse_page(page)
    offset = (number - 1) * page_size
    return PageSlice(
        items=list(items[offset:offset + page_size]),
        has_more=len(items) > offset + page_size,
        total=len(items),
        page=number,
    )


def slice_cursor_page(rows: Sequence[T], page_size: int) -> CursorSlice[T]:
    """Turn a ``page_size + 1`` fetch into a page plus continuation cursor."""
    has_more = len(rows) > page_size
    items = list(rows[:page_size])
    next_cursor = FeedCursor.for_row(items[-1]) if items else None
    return CursorSlice(items=items, has_more=has_more, next_cursor=next_cursor)
