# mypy: ignore-errors
# tests/v1/test_feed.py
"""Tests for the feed endpoints."""

from datetime import timedelta

from fastapi import status


def test_ranked_feed_shape(client, make_post) -> None:
    make_post("hot", votes=10, age=timedelta(hours=2))
    make_post("fresh", votes=1, age=timedelta(minutes=6))

    response = client.get("/api/v1/feed/ranked")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total_posts"] == 2
    assert body["has_more"] is False
    assert [(item["post"]["title"], item["rank"]) for item in body["posts"]] == [("hot", 1), ("fresh", 2)]
    assert body["posts"][0]["post"]["author_username"] == "alice"


def test_ranked_feed_tolerates_bad_page(client, make_post) -> None:
    make_post("only", votes=1)
    response = client.get("/api/v1/feed/ranked", params={"page": "abc"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["page"] == 1


def test_ranked_feed_marks_votes_for_caller(client, auth_token, test_post) -> None:
    client.post("/api/v1/votes/", json={"post_id": test_post.id}, headers=auth_token)

    mine = client.get("/api/v1/feed/ranked", headers=auth_token).json()
    anonymous = client.get("/api/v1/feed/ranked").json()

    assert mine["posts"][0]["post"]["did_vote"] is True
    assert anonymous["posts"][0]["post"]["did_vote"] is False


def test_newest_feed_cursor(client, make_post) -> None:
    for index in range(3):
        make_post(f"post {index}", age=timedelta(minutes=10 - index))

    first = client.get("/api/v1/feed/newest").json()
    assert [item["title"] for item in first["posts"]] == ["post 2", "post 1", "post 0"]
    assert first["has_more"] is False

    response = client.get("/api/v1/feed/newest", params={"cursor": first["next_cursor"]})
    assert response.json()["posts"] == []


def test_newest_feed_cursor_survives_unencoded_query(client, make_post) -> None:
    for index in range(3):
        make_post(f"post {index}", age=timedelta(minutes=10 - index))

    first = client.get("/api/v1/feed/newest").json()
    response = client.get("/api/v1/feed/newest?cursor=" + first["next_cursor"])

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["posts"] == []


def test_newest_feed_ignores_garbage_cursor(client, test_post) -> None:
    response = client.get("/api/v1/feed/newest", params={"cursor": "%%%"})
    assert response.status_code == status.HTTP_200_OK
    assert [item["id"] for item in response.json()["posts"]] == [test_post.id]


def test_ask_and_share_feeds(client, make_post) -> None:
    make_post("أسأل بابل: كيف؟")
    make_post("شارك بابل: مقال")

    ask = client.get("/api/v1/feed/ask").json()
    share = client.get("/api/v1/feed/share").json()

    assert [item["title"] for item in ask["posts"]] == ["أسأل بابل: كيف؟"]
    assert [item["title"] for item in share["posts"]] == ["شارك بابل: مقال"]


def test_user_feeds(client, test_user, test_post, make_comment) -> None:
    make_comment(test_post, "hello")

    posts = client.get(f"/api/v1/feed/users/{test_user.username}")
    comments = client.get(f"/api/v1/comments/users/{test_user.username}")
    missing = client.get("/api/v1/feed/users/ghost")

    assert [item["id"] for item in posts.json()["posts"]] == [test_post.id]
    assert [item["text"] for item in comments.json()["comments"]] == ["hello"]
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["detail"]["code"] == "USER_NOT_FOUND"


def test_months_endpoints(client, test_post) -> None:
    months = client.get("/api/v1/feed/months").json()
    assert len(months) == 1 and months[0]["count"] == 1

    month_feed = client.get(f"/api/v1/feed/months/{months[0]['month']}").json()
    assert [item["id"] for item in month_feed["posts"]] == [test_post.id]

    bad = client.get("/api/v1/feed/months/garbage")
    assert bad.status_code == status.HTTP_200_OK
    assert bad.json()["posts"] == []

    last_month = client.get("/api/v1/feed/months/9999-12")
    assert last_month.status_code == status.HTTP_200_OK
    assert last_month.json()["posts"] == []


def test_new_comments_endpoint(client, test_post, make_comment) -> None:
    make_comment(test_post, "older", age=timedelta(minutes=3))
    make_comment(test_post, "newer", age=timedelta(minutes=1))

    body = client.get("/api/v1/comments/new").json()

    assert [item["text"] for item in body["comments"]] == ["newer", "older"]
    assert body["comments"][0]["post_title"] == test_post.title
