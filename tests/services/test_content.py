# tests/services/test_content.py
"""Tests for the post and comment lifecycle."""

from datetime import timedelta

import pytest

from babel_board.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from babel_board.core.settings import settings
from babel_board.db.time import utcnow
from babel_board.schemas.comment import DELETED_PLACEHOLDER
from babel_board.services import content
from babel_board.services.engagement import EngagementRecorder
from babel_board.services.targets import PostTarget


def test_create_post_starts_with_zero_counters(db_session, test_user) -> None:
    post = content.create_post(db_session, author_id=test_user.id, title="Hello", url="https://example.com")
    assert post.id is not None
    assert (post.votes, post.comment_count, post.report_count) == (0, 0, 0)
    assert not post.hidden


def test_muted_user_cannot_create_post(db_session, make_user) -> None:
    muted = make_user(muted_until=utcnow() + timedelta(hours=2))
    with pytest.raises(ConflictError) as excinfo:
        content.create_post(db_session, author_id=muted.id, title="nope")
    assert excinfo.value.code == "USER_MUTED"


def test_edit_post_within_cooldown(db_session, test_user, make_post) -> None:
    post = make_post("Old title", age=timedelta(minutes=5), text="body")

    edited = content.edit_post(db_session, post_id=post.id, user_id=test_user.id, title="New title", text=None)

    assert edited.title == "New title"
    assert edited.text is None


def test_edit_post_after_cooldown_is_rejected(db_session, test_user, make_post) -> None:
    post = make_post(age=timedelta(minutes=settings.edit_cooldown_minutes + 1))
    with pytest.raises(ConflictError) as excinfo:
        content.edit_post(db_session, post_id=post.id, user_id=test_user.id, title="late")
    assert excinfo.value.code == "EDIT_COOLDOWN_EXPIRED"


def test_only_author_can_edit(db_session, other_user, test_post) -> None:
    with pytest.raises(PermissionDeniedError):
        content.edit_post(db_session, post_id=test_post.id, user_id=other_user.id, title="mine now")


def test_hide_post_by_author_or_moderator(db_session, test_user, other_user, moderator, make_post) -> None:
    own = make_post("own")
    moderated = make_post("moderated")

    content.hide_post(db_session, post_id=own.id, user_id=test_user.id)
    content.hide_post(db_session, post_id=moderated.id, user_id=moderator.id)
    assert own.hidden and moderated.hidden

    with pytest.raises(NotFoundError):
        content.hide_post(db_session, post_id=own.id, user_id=test_user.id)

    third = make_post("third")
    with pytest.raises(PermissionDeniedError):
        content.hide_post(db_session, post_id=third.id, user_id=other_user.id)


def test_create_comment_increments_comment_count(db_session, other_user, test_post) -> None:
    top = content.create_comment(db_session, post_id=test_post.id, author_id=other_user.id, text="first")
    reply = content.create_comment(
        db_session,
        post_id=test_post.id,
        author_id=other_user.id,
        text="reply",
        parent_id=top.id,
    )

    db_session.refresh(test_post)
    assert test_post.comment_count == 2
    assert reply.parent_id == top.id


def test_parent_must_belong_to_same_post(db_session, test_user, make_post, make_comment) -> None:
    post, elsewhere = make_post("a"), make_post("b")
    foreign = make_comment(elsewhere)

    with pytest.raises(NotFoundError) as excinfo:
        content.create_comment(db_session, post_id=post.id, author_id=test_user.id, text="x", parent_id=foreign.id)
    assert excinfo.value.code == "COMMENT_NOT_FOUND"


def test_comment_cap_closes_thread(db_session, test_user, make_post, monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_comments_per_post", 2)
    post = make_post(comment_count=2)

    with pytest.raises(ConflictError) as excinfo:
        content.create_comment(db_session, post_id=post.id, author_id=test_user.id, text="one too many")
    assert excinfo.value.code == "COMMENTS_CLOSED"


def test_no_comments_on_hidden_post(db_session, test_user, make_post) -> None:
    post = make_post(hidden=True)
    with pytest.raises(ConflictError) as excinfo:
        content.create_comment(db_session, post_id=post.id, author_id=test_user.id, text="hi")
    assert excinfo.value.code == "POST_HIDDEN"


def test_hide_comment_decrements_comment_count(db_session, test_user, test_post) -> None:
    comment = content.create_comment(db_session, post_id=test_post.id, author_id=test_user.id, text="bye")

    content.hide_comment(db_session, comment_id=comment.id, user_id=test_user.id)

    db_session.refresh(test_post)
    assert test_post.comment_count == 0
    with pytest.raises(NotFoundError):
        content.edit_comment(db_session, comment_id=comment.id, user_id=test_user.id, text="again")


def test_thread_keeps_placeholder_for_hidden_parent(
    db_session,
    test_user,
    other_user,
    test_post,
    make_comment,
) -> None:
    parent = make_comment(test_post, "parent", age=timedelta(minutes=30), hidden=True)
    child = make_comment(test_post, "child", parent=parent, author=other_user, age=timedelta(minutes=20))
    lonely_hidden = make_comment(test_post, "gone", age=timedelta(minutes=10), hidden=True)
    reported = make_comment(
        test_post,
        "reported",
        age=timedelta(minutes=5),
        report_count=settings.report_threshold + 1,
    )

    detail = content.get_post_with_thread(db_session, test_post.id)

    by_id = {entry.id: entry for entry in detail.comments}
    assert list(by_id) == [parent.id, child.id]
    assert by_id[parent.id].deleted
    assert by_id[parent.id].text == DELETED_PLACEHOLDER
    assert by_id[parent.id].author_username is None
    assert by_id[child.id].text == "child"
    assert by_id[child.id].author_username == other_user.username
    assert lonely_hidden.id not in by_id and reported.id not in by_id


def test_post_detail_annotates_user_state(db_session, test_user, other_user, test_post) -> None:
    EngagementRecorder(db_session).apply_vote(other_user.id, PostTarget(test_post.id))

    mine = content.get_post_with_thread(db_session, test_post.id, other_user.id)
    anonymous = content.get_post_with_thread(db_session, test_post.id)

    assert mine.did_vote and not mine.did_report
    assert not anonymous.did_vote
    assert mine.votes == 1
    assert mine.author_username == test_user.username


def test_hidden_post_detail_is_not_found(db_session, make_post) -> None:
    post = make_post(hidden=True)
    with pytest.raises(NotFoundError):
        content.get_post_with_thread(db_session, post.id)
