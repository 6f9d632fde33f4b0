# tests/v1/test_users.py
"""Tests for profile updates, identity fan-out and user lookups."""

from fastapi import status

from eduverse.models import Chat, Comment, Message, Post, User
from eduverse.models.chat import pair_key

from tests.conftest import auth_headers


def _seed_content(db_session, author: User, other: User, post: Post) -> Chat:
    """Give ``author`` a comment, a chat and a message carrying their snapshot."""
    db_session.add(
        Comment(
            post_id=post.id,
            sender_id=author.id,
            sender_name=author.name,
            sender_image_id=author.image_id,
            body="Nice",
        )
    )
    chat = Chat(
        pair_key=pair_key(other.id, author.id),
        user1_id=other.id,
        user1_name=other.name,
        user2_id=author.id,
        user2_name=author.name,
        last_message="hi",
    )
    db_session.add(chat)
    db_session.flush()
    db_session.add(
        Message(
            chat_id=chat.id,
            sender_id=author.id,
            sender_name=author.name,
            receiver_id=other.id,
            text="hi",
        )
    )
    db_session.commit()
    return chat


class TestProfileUpdate:
    def test_update_profile_fields(self, client, test_user: User, auth_token) -> None:
        response = client.put(
            "/api/users/profile",
            json={"level": "Level 4", "bio": "Likes graphs"},
            headers=auth_token,
        )
        assert response.status_code == status.HTTP_200_OK
        user = response.json()["user"]
        assert user["level"] == "Level 4"
        assert user["bio"] == "Likes graphs"
        assert user["name"] == test_user.name

    def test_rename_propagates_to_every_snapshot(
        self, client, db_session, test_user: User, other_user: User, test_post: Post, auth_token
    ) -> None:
        chat = _seed_content(db_session, test_user, other_user, test_post)

        response = client.put(
            "/api/users/profile",
            json={"name": "Renamed User", "imageId": "avatar123"},
            headers=auth_token,
        )
        assert response.status_code == status.HTTP_200_OK

        db_session.expire_all()
        post = db_session.get(Post, test_post.id)
        assert (post.sender_name, post.sender_image_id) == ("Renamed User", "avatar123")
        comment = db_session.query(Comment).filter_by(sender_id=test_user.id).one()
        assert comment.sender_name == "Renamed User"
        message = db_session.query(Message).filter_by(sender_id=test_user.id).one()
        assert message.sender_name == "Renamed User"
        chat = db_session.get(Chat, chat.id)
        assert chat.user2_name == "Renamed User"
        assert chat.user2_image_id == "avatar123"
        assert chat.user1_name == other_user.name

    def test_put_user_id_updates_self(self, client, test_user: User, auth_token) -> None:
        response = client.put(
            f"/api/users/{test_user.id}", json={"name": "Via Id"}, headers=auth_token
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["name"] == "Via Id"

    def test_put_other_user_forbidden(self, client, other_user: User, auth_token) -> None:
        response = client.put(
            f"/api/users/{other_user.id}", json={"name": "Hijack"}, headers=auth_token
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_email_change_to_taken_address(self, client, other_user: User, auth_token) -> None:
        response = client.put(
            "/api/users/profile", json={"email": other_user.email}, headers=auth_token
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email already exists"


class TestReconciliation:
    def test_stale_post_snapshot_is_corrected_on_read(
        self, client, db_session, test_user: User, test_post: Post
    ) -> None:
        # Simulate a post written with a stale snapshot after the fan-out ran.
        test_post.sender_name = "Old Name"
        db_session.commit()

        response = client.get("/api/posts", params={"courseId": test_post.course_id})
        assert response.status_code == status.HTTP_200_OK
        [post] = response.json()
        assert post["sender"]["name"] == test_user.name
        assert post["sender"]["id"] == test_user.id

    def test_snapshot_of_deleted_user_is_kept(
        self, client, db_session, test_user: User, test_post: Post
    ) -> None:
        db_session.delete(test_user)
        db_session.commit()

        response = client.get(f"/api/posts/{test_post.id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["post"]["sender"]["name"] == "Test User"


class TestLookups:
    def test_get_user(self, client, test_user: User, other_auth_token) -> None:
        response = client.get(f"/api/users/{test_user.id}", headers=other_auth_token)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["email"] == test_user.email

    def test_get_unknown_user(self, client, auth_token) -> None:
        response = client.get("/api/users/missing", headers=auth_token)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_search_excludes_caller(self, client, make_user, test_user: User, auth_token) -> None:
        make_user("Test Partner")
        response = client.get("/api/users/search", params={"query": "test"}, headers=auth_token)
        assert response.status_code == status.HTTP_200_OK
        names = [user["name"] for user in response.json()["users"]]
        assert names == ["Test Partner"]

    def test_search_requires_two_characters(self, client, auth_token) -> None:
        response = client.get("/api/users/search", params={"query": "a"}, headers=auth_token)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_user_posts_paginated(self, client, db_session, test_user: User, auth_token) -> None:
        for index in range(3):
            db_session.add(
                Post(sender_id=test_user.id, sender_name=test_user.name, body=f"post {index}")
            )
        db_session.commit()

        response = client.get(
            f"/api/users/{test_user.id}/posts", params={"page": 1, "limit": 2}, headers=auth_token
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["posts"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    def test_user_stats(self, client, db_session, test_user: User, test_post: Post, auth_token) -> None:
        db_session.add(
            Comment(post_id=test_post.id, sender_id=test_user.id, sender_name=test_user.name, body="x")
        )
        db_session.commit()

        response = client.get(f"/api/users/{test_user.id}/stats", headers=auth_token)
        assert response.json() == {"posts": 1, "comments": 1, "reactions": 0}

    def test_instructor_courses_are_taught_courses(
        self, client, instructor: User, course, auth_token
    ) -> None:
        response = client.get(f"/api/users/{instructor.id}/courses", headers=auth_token)
        assert [c["id"] for c in response.json()["courses"]] == [course.id]

    def test_student_courses_are_enrollments(self, client, test_user: User, course) -> None:
        headers = auth_headers(test_user)
        client.post(f"/api/courses/{course.id}/enroll", headers=headers)

        response = client.get(f"/api/users/{test_user.id}/courses", headers=headers)
        assert [c["id"] for c in response.json()["courses"]] == [course.id]

    def test_search_wildcards_match_literally(self, client, make_user, auth_token) -> None:
        make_user("Zed")
        make_user("Top 10% Student")

        wildcard = client.get("/api/users/search", params={"query": "%%"}, headers=auth_token)
        assert wildcard.status_code == status.HTTP_200_OK
        assert wildcard.json()["users"] == []

        underscore = client.get("/api/users/search", params={"query": "Z_d"}, headers=auth_token)
        assert underscore.json()["users"] == []

        literal = client.get("/api/users/search", params={"query": "10%"}, headers=auth_token)
        assert [user["name"] for user in literal.json()["users"]] == ["Top 10% Student"]

    def test_public_profile_routes_need_no_token(self, client, test_user: User, test_post: Post) -> None:
        for suffix in ("", "/posts", "/courses", "/stats"):
            response = client.get(f"/api/users/{test_user.id}{suffix}")
            assert response.status_code == status.HTTP_200_OK, suffix

        assert client.get("/api/users/me").status_code == status.HTTP_401_UNAUTHORIZED
