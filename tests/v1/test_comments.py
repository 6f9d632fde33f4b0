# tests/v1/test_comments.py
"""Tests for comment endpoints."""

from fastapi import status

from eduverse.models import Comment, Post, User


def test_comment_on_post(client, test_user: User, test_post: Post, auth_token) -> None:
    response = client.post(
        "/api/comments",
        json={"postId": test_post.id, "body": "Great question"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["postId"] == test_post.id
    assert data["sender"]["name"] == test_user.name

    listing = client.get("/api/comments", params={"postId": test_post.id})
    assert [comment["id"] for comment in listing.json()] == [data["id"]]


def test_comment_on_missing_post(client, auth_token) -> None:
    response = client.post(
        "/api/comments", json={"postId": "missing", "body": "hello"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_comment_requires_body(client, test_post: Post, auth_token) -> None:
    response = client.post("/api/comments", json={"postId": test_post.id}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_parent_comment_must_share_post(
    client, db_session, test_user: User, test_post: Post, auth_token
) -> None:
    elsewhere = Post(sender_id=test_user.id, sender_name=test_user.name, body="another")
    db_session.add(elsewhere)
    db_session.flush()
    foreign = Comment(post_id=elsewhere.id, sender_id=test_user.id, sender_name=test_user.name, body="x")
    db_session.add(foreign)
    db_session.commit()

    response = client.post(
        "/api/comments",
        json={"postId": test_post.id, "body": "reply", "parentCommentId": foreign.id},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_list_comments_requires_post_id(client) -> None:
    assert client.get("/api/comments").status_code == status.HTTP_400_BAD_REQUEST


def test_delete_comment_only_by_author(
    client, test_post: Post, auth_token, other_auth_token
) -> None:
    comment_id = client.post(
        "/api/comments", json={"postId": test_post.id, "body": "mine"}, headers=auth_token
    ).json()["id"]

    forbidden = client.delete(f"/api/comments/{comment_id}", headers=other_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    deleted = client.delete(f"/api/comments/{comment_id}", headers=auth_token)
    assert deleted.status_code == status.HTTP_200_OK

    missing = client.delete(f"/api/comments/{comment_id}", headers=auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND
