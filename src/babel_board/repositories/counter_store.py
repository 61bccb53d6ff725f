"""Atomic maintenance of the denormalized engagement counters.

Counters are only ever changed with a single relative ``UPDATE`` statement
(``SET votes = votes + :delta``) so concurrent writers cannot lose each
other's updates. Reading a value, adding in Python and writing it back is
never done here.
"""
from __future__ import annotations

import logging

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from babel_board.core.errors import NotFoundError
from babel_board.db.time import utcnow
from babel_board.models import Comment, Post, Report, UserStanding, Vote
from babel_board.services.targets import CommentTarget, PostTarget, Target

__all__ = ["COUNTER_FIELDS", "CounterStore"]

logger = logging.getLogger(__name__)

COUNTER_FIELDS: dict[type, frozenset[str]] = {
    Post: frozenset({"votes", "comment_count", "report_count"}),
    Comment: frozenset({"votes", "report_count"}),
}


def _not_found(target: Target) -> NotFoundError:
    if isinstance(target, PostTarget):
        return NotFoundError(f"Post {target.id} not found", code="POST_NOT_FOUND")
    return NotFoundError(f"Comment {target.id} not found", code="COMMENT_NOT_FOUND")


class CounterStore:
    """Row-level atomic counter primitives on top of a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def increment(self, target: Target, field: str, delta: int) -> int:
        """Apply ``delta`` to ``field`` of the target row and return the new value.

        Decrements never take a counter below zero.

        Raises:
            ValueError: If ``field`` is not a counter of the target's model.
            NotFoundError: If the target row does not exist.
        """
        model = target.model
        if field not in COUNTER_FIELDS[model]:
            raise ValueError(f"{model.__name__} has no counter named {field!r}")

        column = getattr(model, field)
        shifted = column + delta
        stmt = (
            update(model)
            .where(model.id == target.id)
            .values({field: case((shifted < 0, 0), else_=shifted)})
            .returning(column)
            .execution_options(synchronize_session="fetch")
        )
        new_value = self.session.execute(stmt).scalar_one_or_none()
        if new_value is None:
            raise _not_found(target)
        return int(new_value)

    def adjust_karma(self, user_id: int, delta: float) -> float:
        """Add ``delta`` to a user's karma. The standing row must already exist."""
        stmt = (
            update(UserStanding)
            .where(UserStanding.user_id == user_id)
            .values(
                karma=UserStanding.karma + delta,
                karma_last_updated=utcnow(),
            )
            .returning(UserStanding.karma)
            .execution_options(synchronize_session="fetch")
        )
        new_value = self.session.execute(stmt).scalar_one_or_none()
        if new_value is None:
            raise NotFoundError(f"No standing for user {user_id}", code="USER_NOT_FOUND")
        return float(new_value)

    def recount(self, target: Target) -> dict[str, int]:
        """Recompute the target's counters from its child rows.

        This is the operator repair for counter drift; it overwrites the
        stored values with the authoritative counts.
        """
        self.session.flush()
        model = target.model
        row = self.session.get(model, target.id)
        if row is None:
            raise _not_found(target)

        link = Vote.post_id if isinstance(target, PostTarget) else Vote.comment_id
        report_link = Report.post_id if isinstance(target, PostTarget) else Report.comment_id
        counts = {
            "votes": self._count(
                select(func.count()).select_from(Vote).where(link == target.id)
            ),
            "report_count": self._count(
                select(func.count()).select_from(Report).where(report_link == target.id)
            ),
        }
        if not isinstance(target, CommentTarget):
            counts["comment_count"] = self._count(
                select(func.count()).select_from(Comment).where(
                    Comment.post_id == target.id,
                    Comment.hidden.is_(False),
                )
            )

        drift = {field: value for field, value in counts.items() if getattr(row, field) != value}
        if drift:
            logger.warning(
                "Repairing counter drift on %s %s: %s",
                target.kind,
                target.id,
                drift,
            )
            for field, value in counts.items():
                setattr(row, field, value)
            self.session.flush()
        return counts

    def _count(self, stmt) -> int:
        return int(self.session.execute(stmt).scalar_one())
