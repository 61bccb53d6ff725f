# tests/services/test_standing.py
"""Tests for lazily created user standing."""

from datetime import timedelta

import pytest

from babel_board.core.errors import ConflictError, NotFoundError
from babel_board.db.time import utcnow
from babel_board.models import User, UserStanding
from babel_board.services.standing import adjust_karma, ensure_can_post, get_or_create_standing


def test_standing_is_created_on_first_access(db_session) -> None:
    user = User(username="newcomer")
    db_session.add(user)
    db_session.flush()

    standing = get_or_create_standing(db_session, user.id)
    db_session.flush()

    assert standing.karma == 0.0
    assert standing.role == "user"
    assert db_session.get(UserStanding, user.id) is standing


def test_unknown_user_has_no_standing(db_session) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        get_or_create_standing(db_session, 31337)
    assert excinfo.value.code == "USER_NOT_FOUND"


def test_adjust_karma_creates_standing(db_session) -> None:
    user = User(username="karma")
    db_session.add(user)
    db_session.flush()

    assert adjust_karma(db_session, user.id, 3.0) == pytest.approx(3.0)


def test_banned_and_muted_users_cannot_post(db_session, make_user) -> None:
    banned = make_user(banned_until=utcnow() + timedelta(days=1), ban_reason="spam")
    muted = make_user(muted_until=utcnow() + timedelta(hours=1))
    released = make_user(banned_until=utcnow() - timedelta(days=1))

    with pytest.raises(ConflictError) as ban_exc:
        ensure_can_post(db_session, banned.id)
    with pytest.raises(ConflictError) as mute_exc:
        ensure_can_post(db_session, muted.id)

    assert ban_exc.value.code == "USER_BANNED"
    assert ban_exc.value.message == "spam"
    assert mute_exc.value.code == "USER_MUTED"
    assert ensure_can_post(db_session, released.id).user_id == released.id
