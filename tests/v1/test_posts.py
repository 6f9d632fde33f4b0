# tests/v1/test_posts.py
"""Tests for post endpoints."""

from fastapi import status

from eduverse.models import Comment, Post, Reaction, User

from tests.conftest import auth_headers


def test_create_post_defaults_to_discussion(client, test_user: User, course, auth_token) -> None:
    response = client.post(
        "/api/posts",
        json={"courseId": course.id, "title": "Hello", "body": "First!"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["type"] == "discussion"
    assert data["sender"] == {"id": test_user.id, "name": test_user.name, "imageId": None}
    assert data["answered"] is False


def test_create_post_type_is_case_insensitive(client, course, auth_token) -> None:
    response = client.post(
        "/api/posts",
        json={"courseId": course.id, "body": "When is the exam?", "type": "QUESTION"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["type"] == "question"


def test_create_post_invalid_type(client, auth_token) -> None:
    response = client.post(
        "/api/posts", json={"body": "x", "type": "poll"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_post_requires_auth(client) -> None:
    response = client.post("/api/posts", json={"body": "anonymous"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_list_posts_filters(client, db_session, test_user: User, test_post: Post) -> None:
    db_session.add(
        Post(
            sender_id=test_user.id,
            sender_name=test_user.name,
            course_id="OTHER",
            body="elsewhere",
            type="announcement",
        )
    )
    db_session.commit()

    by_course = client.get("/api/posts", params={"courseId": test_post.course_id}).json()
    assert [post["id"] for post in by_course] == [test_post.id]

    by_type = client.get("/api/posts", params={"type": "announcement"}).json()
    assert [post["courseId"] for post in by_type] == ["OTHER"]


def test_read_post_detail(client, db_session, test_user: User, other_user: User, test_post: Post) -> None:
    db_session.add(
        Comment(post_id=test_post.id, sender_id=other_user.id, sender_name=other_user.name, body="+1")
    )
    db_session.add(Reaction(post_id=test_post.id, sender_id=other_user.id, type="love"))
    db_session.commit()

    response = client.get(f"/api/posts/{test_post.id}", headers=auth_headers(other_user))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["post"]["id"] == test_post.id
    assert [comment["body"] for comment in data["comments"]] == ["+1"]
    assert data["reactions"] == {"like": 0, "love": 1, "shocked": 0, "laugh": 0, "sad": 0}
    assert data["userReaction"] == "love"


def test_read_missing_post(client) -> None:
    assert client.get("/api/posts/nope").status_code == status.HTTP_404_NOT_FOUND


def test_update_post_by_owner(client, test_post: Post, auth_token) -> None:
    response = client.put(
        f"/api/posts/{test_post.id}",
        json={"title": "Edited", "answered": True},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == "Edited"
    assert response.json()["answered"] is True


def test_update_post_by_other_user_forbidden(client, test_post: Post, other_auth_token) -> None:
    response = client.put(
        f"/api/posts/{test_post.id}", json={"title": "Hijack"}, headers=other_auth_token
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_delete_post_cascades_comments_and_reactions(
    client, db_session, test_user: User, other_user: User, test_post: Post, auth_token
) -> None:
    other_post = Post(sender_id=other_user.id, sender_name=other_user.name, body="keep me")
    db_session.add(other_post)
    db_session.flush()
    for post in (test_post, other_post):
        db_session.add(
            Comment(post_id=post.id, sender_id=other_user.id, sender_name=other_user.name, body="c")
        )
        db_session.add(Reaction(post_id=post.id, sender_id=other_user.id, type="like"))
    db_session.commit()
    post_id, other_post_id = test_post.id, other_post.id

    response = client.delete(f"/api/posts/{post_id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK

    db_session.expire_all()
    assert db_session.get(Post, post_id) is None
    assert db_session.query(Comment).filter_by(post_id=post_id).count() == 0
    assert db_session.query(Reaction).filter_by(post_id=post_id).count() == 0
    assert db_session.query(Comment).filter_by(post_id=other_post_id).count() == 1
    assert db_session.query(Reaction).filter_by(post_id=other_post_id).count() == 1


def test_admin_may_delete_any_post(client, test_post: Post, admin_token) -> None:
    response = client.delete(f"/api/posts/{test_post.id}", headers=admin_token)
    assert response.status_code == status.HTTP_200_OK
