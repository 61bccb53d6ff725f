"""Visibility rules shared by every user-facing query."""
from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import ColumnElement, and_

from babel_board.core.settings import settings


class Moderatable(Protocol):
    hidden: bool
    report_count: int | None


def is_visible(row: Moderatable, threshold: int | None = None) -> bool:
    """Return True if ``row`` may be shown to end users.

    A row is visible when it is not soft-deleted and its report count does not
    exceed the moderation threshold. Parents are not consulted: a reply stays
    visible when its parent is hidden.
    """
    limit = settings.report_threshold if threshold is None else threshold
    return not row.hidden and (row.report_count or 0) <= limit


def visible_clause(model: Any, threshold: int | None = None) -> ColumnElement[bool]:
    """Return the SQL equivalent of :func:`is_visible` for ``model``."""
    limit = settings.report_threshold if threshold is None else threshold
    return and_(model.hidden.is_(False), model.report_count <= limit)
