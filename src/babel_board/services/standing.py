"""User standing: lazily created reputation and moderation state."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from babel_board.core.errors import ConflictError, NotFoundError
from babel_board.db.time import as_utc, utcnow
from babel_board.models import User, UserStanding
from babel_board.repositories.counter_store import CounterStore

logger = logging.getLogger(__name__)


def get_or_create_standing(db: Session, user_id: int) -> UserStanding:
    """Return the standing row for ``user_id``, creating it on first access.

    Raises:
        NotFoundError: If the user does not exist.
    """
    standing = db.get(UserStanding, user_id)
    if standing is not None:
        return standing
    if db.get(User, user_id) is None:
        raise NotFoundError(f"User {user_id} not found", code="USER_NOT_FOUND")

    try:
        with db.begin_nested():
            standing = UserStanding(user_id=user_id, karma=0.0)
            db.add(standing)
    except IntegrityError:
        # Another request created the row first.
        logger.debug("Standing for user %s created concurrently", user_id)
        standing = db.get(UserStanding, user_id)
        if standing is None:
            raise
    return standing


def _still_active(until: datetime | None, now: datetime) -> bool:
    return until is not None and as_utc(until) > now


def ensure_can_post(db: Session, user_id: int) -> UserStanding:
    """Reject content creation from banned or muted users.

    Raises:
        ConflictError: With ``USER_BANNED`` or ``USER_MUTED``.
    """
    standing = get_or_create_standing(db, user_id)
    now = utcnow()
    if _still_active(standing.banned_until, now):
        raise ConflictError(
            standing.ban_reason or "This account is banned",
            code="USER_BANNED",
        )
    if _still_active(standing.muted_until, now):
        raise ConflictError(
            standing.mute_reason or "This account is muted",
            code="USER_MUTED",
        )
    return standing


def is_moderator(db: Session, user_id: int) -> bool:
    """Return True if the user holds the moderator role."""
    standing = db.get(UserStanding, user_id)
    return standing is not None and standing.is_moderator


def adjust_karma(db: Session, user_id: int, delta: float) -> float:
    """Atomically add ``delta`` to the user's karma and return the new total."""
    get_or_create_standing(db, user_id)
    db.flush()
    karma = CounterStore(db).adjust_karma(user_id, delta)
    logger.info("Adjusted karma for user %s by %s to %s", user_id, delta, karma)
    return karma
