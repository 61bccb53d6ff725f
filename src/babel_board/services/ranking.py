"""Decay-weighted popularity ranking for the hot feed.

Each post scores::

    score = ln(votes + 1) / (age_hours + 2) ** 1.2

so a post with no votes scores zero and older posts need proportionally more
votes to stay on top. The whole eligible window is ranked at once and pages
are sliced from that single sequence, which keeps ranks stable across pages.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from babel_board.db.time import as_utc, utcnow

GRAVITY = 1.2
AGE_OFFSET_HOURS = 2.0

T = TypeVar("T")


@dataclass(frozen=True)
class Ranked(Generic[T]):
    """An item paired with its 1-based position in the full ranking."""

    item: T
    rank: int
    score: float


def compute_score(votes: int | None, age_hours: float) -> float:
    """Return the ranking score for a vote count and age in hours."""
    safe_votes = max(0, votes or 0)
    safe_age = max(age_hours, 0.0)
    return math.log(safe_votes + 1) / (safe_age + AGE_OFFSET_HOURS) ** GRAVITY


def age_in_hours(created_at: Any, now: datetime) -> float:
    """Return the age of ``created_at`` relative to ``now`` in hours.

    Missing or unparseable timestamps count as brand new (age 0) rather than
    failing the whole ranking. Future timestamps are clamped to 0.
    """
    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at)
        except ValueError:
            return 0.0
    if not isinstance(created_at, datetime):
        return 0.0

    hours = (as_utc(now) - as_utc(created_at)).total_seconds() / 3600
    if math.isnan(hours) or hours < 0:
        return 0.0
    return hours


def rank_posts(posts: Iterable[T], now: datetime | None = None) -> list[Ranked[T]]:
    """Order ``posts`` by descending score and assign sequential ranks.

    Items only need ``votes`` and ``created_at`` attributes. Ties keep their
    input order.
    """
    reference = now or utcnow()
    scored: list[tuple[float, T]] = []
    for post in posts:
        age = age_in_hours(getattr(post, "created_at", None), reference)
        scored.append((compute_score(getattr(post, "votes", 0), age), post))

    # list.sort is stable, so equal scores keep their original relative order.
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [
        Ranked(item=post, rank=index, score=score)
        for index, (score, post) in enumerate(scored, start=1)
    ]
