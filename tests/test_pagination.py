# tests/test_pagination.py
"""Tests for page and cursor pagination helpers."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from babel_board.services.pagination import (
    FeedCursor,
    parse_cursor,
    parse_page,
    slice_cursor_page,
    slice_page,
)

BASE = datetime(2026, 10, 1, tzinfo=UTC)


@dataclass
class Row:
    id: int
    created_at: datetime


@pytest.mark.parametrize("raw", [None, "", "abc", "0", "-3", 0, -1, "2.5"])
def test_parse_page_falls_back_to_first_page(raw) -> None:
    assert parse_page(raw) == 1


def test_parse_page_accepts_numbers() -> None:
    assert parse_page("3") == 3
    assert parse_page(2) == 2


def test_slice_page_reports_has_more_and_total() -> None:
    items = list(range(1, 8))

    first = slice_page(items, 1, 3)
    last = slice_page(items, 3, 3)
    beyond = slice_page(items, 4, 3)

    assert first.items == [1, 2, 3] and first.has_more and first.total == 7
    assert last.items == [7] and not last.has_more
    assert beyond.items == [] and not beyond.has_more


def test_page_concatenation_is_exhaustive() -> None:
    items = list(range(23))
    collected = []
    page = 1
    while True:
        window = slice_page(items, page, 5)
        collected.extend(window.items)
        if not window.has_more:
            break
        page += 1
    assert collected == items


def test_cursor_round_trip_with_id() -> None:
    cursor = FeedCursor(created_at=BASE, id=42)
    assert parse_cursor(cursor.encode()) == cursor


def test_cursor_token_is_query_string_safe() -> None:
    token = FeedCursor(created_at=BASE + timedelta(microseconds=5), id=7).encode()

    assert token == "2026-10-01T00:00:00.000005Z|7"
    assert "+" not in token and " " not in token


def test_cursor_without_id_is_accepted() -> None:
    parsed = parse_cursor(BASE.isoformat())
    assert parsed == FeedCursor(created_at=BASE, id=None)


def test_naive_cursor_is_read_as_utc() -> None:
    parsed = parse_cursor("2026-10-01T00:00:00")
    assert parsed is not None
    assert parsed.created_at == BASE


@pytest.mark.parametrize("raw", [None, "", "   ", "garbage", "2026-13-01T00:00:00", "2026-10-01T00:00:00|x"])
def test_malformed_cursor_means_no_cursor(raw) -> None:
    assert parse_cursor(raw) is None


def test_slice_cursor_page_drops_lookahead_row() -> None:
    rows = [Row(index, BASE + timedelta(hours=index)) for index in (5, 4, 3)]

    page = slice_cursor_page(rows, 2)

    assert [row.id for row in page.items] == [5, 4]
    assert page.has_more
    assert page.next_cursor == FeedCursor(created_at=rows[1].created_at, id=4)


def test_slice_cursor_page_on_empty_input() -> None:
    page = slice_cursor_page([], 2)
    assert page.items == [] and not page.has_more and page.next_cursor is None
