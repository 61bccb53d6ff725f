# mypy: ignore-errors
# tests/v1/test_posts.py
"""Tests for post and comment endpoints."""

from datetime import timedelta

from fastapi import status

from babel_board.db.time import utcnow


def test_create_and_fetch_post(client, auth_token) -> None:
    created = client.post(
        "/api/v1/posts/",
        json={"title": "  Hello board  ", "url": "https://example.com", "text": ""},
        headers=auth_token,
    )

    assert created.status_code == status.HTTP_201_CREATED
    body = created.json()
    assert body["title"] == "Hello board"
    assert body["text"] is None
    assert body["votes"] == 0 and body["comment_count"] == 0

    fetched = client.get(f"/api/v1/posts/{body['id']}")
    assert fetched.status_code == status.HTTP_200_OK
    assert fetched.json()["comments"] == []


def test_create_post_validation(client, auth_token) -> None:
    response = client.post("/api/v1/posts/", json={"title": "   "}, headers=auth_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_banned_user_cannot_post(client, make_user, auth_headers) -> None:
    banned = make_user(banned_until=utcnow() + timedelta(days=3))
    response = client.post("/api/v1/posts/", json={"title": "hi"}, headers=auth_headers(banned))

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"]["code"] == "USER_BANNED"


def test_edit_post_permissions(client, auth_token, other_auth_token, test_post) -> None:
    denied = client.patch(f"/api/v1/posts/{test_post.id}", json={"title": "x"}, headers=other_auth_token)
    allowed = client.patch(f"/api/v1/posts/{test_post.id}", json={"title": "Edited"}, headers=auth_token)

    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert denied.json()["detail"]["code"] == "UNAUTHORIZED"
    assert allowed.status_code == status.HTTP_200_OK
    assert allowed.json()["title"] == "Edited"


def test_edit_post_after_cooldown(client, auth_token, make_post) -> None:
    post = make_post(age=timedelta(hours=3))
    response = client.patch(f"/api/v1/posts/{post.id}", json={"title": "late"}, headers=auth_token)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"]["code"] == "EDIT_COOLDOWN_EXPIRED"


def test_delete_post_hides_it(client, auth_token, test_post) -> None:
    response = client.delete(f"/api/v1/posts/{test_post.id}", headers=auth_token)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/posts/{test_post.id}").status_code == status.HTTP_404_NOT_FOUND


def test_comment_lifecycle(client, auth_token, other_auth_token, test_post) -> None:
    top = client.post(
        "/api/v1/comments/",
        json={"post_id": test_post.id, "text": "first!"},
        headers=other_auth_token,
    )
    assert top.status_code == status.HTTP_201_CREATED
    top_id = top.json()["id"]

    reply = client.post(
        "/api/v1/comments/",
        json={"post_id": test_post.id, "parent_id": top_id, "text": "reply"},
        headers=auth_token,
    )
    assert reply.status_code == status.HTTP_201_CREATED

    edited = client.patch(f"/api/v1/comments/{top_id}", json={"text": "first, edited"}, headers=other_auth_token)
    assert edited.json()["text"] == "first, edited"

    deleted = client.delete(f"/api/v1/comments/{top_id}", headers=other_auth_token)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT

    detail = client.get(f"/api/v1/posts/{test_post.id}").json()
    assert detail["comment_count"] == 1
    assert [(item["text"], item["deleted"]) for item in detail["comments"]] == [
        ("[deleted]", True),
        ("reply", False),
    ]


def test_comment_on_missing_post(client, auth_token) -> None:
    response = client.post("/api/v1/comments/", json={"post_id": 4040, "text": "hello"}, headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"]["code"] == "POST_NOT_FOUND"
