# tests/v1/test_auth.py
"""Tests for registration, login, bearer tokens and password reset."""

from datetime import UTC, datetime, timedelta

from fastapi import status

from eduverse.core.security import create_access_token, hash_token
from eduverse.core.settings import settings
from eduverse.models import User

from tests.conftest import TEST_PASSWORD


def _register(client, **overrides):
    payload = {
        "name": "Nour Samir",
        "email": "Nour@Example.com",
        "password": "hunter22",
        "level": "Level 2",
    }
    payload.update(overrides)
    return client.post("/api/users/register", json=payload)


class TestRegister:
    def test_register_returns_token_and_user(self, client) -> None:
        response = _register(client)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "nour@example.com"
        assert data["user"]["role"] == "student"
        assert data["user"]["courses"] == []
        assert "passwordHash" not in data["user"]

    def test_register_instructor_role(self, client) -> None:
        response = _register(client, role="instructor")
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["role"] == "instructor"

    def test_register_cannot_claim_admin(self, client) -> None:
        response = _register(client, role="admin")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_duplicate_email(self, client) -> None:
        assert _register(client).status_code == status.HTTP_201_CREATED
        response = _register(client, email="nour@example.com")
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email already exists"

    def test_register_short_password(self, client) -> None:
        response = _register(client, password="abc")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["detail"].startswith("password: ")
        assert body["errors"][0]["loc"] == ["body", "password"]


class TestLogin:
    def test_login_success(self, client, test_user: User) -> None:
        response = client.post(
            "/api/users/login",
            json={"email": test_user.email, "password": TEST_PASSWORD},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["id"] == test_user.id

    def test_login_wrong_password(self, client, test_user: User) -> None:
        response = client.post(
            "/api/users/login",
            json={"email": test_user.email, "password": "wrong-password"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_unknown_email(self, client) -> None:
        response = client.post(
            "/api/users/login",
            json={"email": "ghost@example.com", "password": "whatever"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_token_authenticates_me(self, client, test_user: User) -> None:
        token = client.post(
            "/api/users/login",
            json={"email": test_user.email, "password": TEST_PASSWORD},
        ).json()["token"]

        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["name"] == test_user.name


class TestBearerToken:
    def test_missing_token(self, client) -> None:
        response = client.get("/api/users/me")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Authentication required"

    def test_garbage_token(self, client) -> None:
        response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid or expired token"

    def test_expired_token(self, client, test_user: User) -> None:
        token = create_access_token(
            test_user.id,
            email=test_user.email,
            role=test_user.role,
            expires_delta=timedelta(minutes=-5),
        )
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_for_deleted_user(self, client, db_session, test_user: User, auth_token) -> None:
        db_session.delete(test_user)
        db_session.commit()

        response = client.get("/api/users/me", headers=auth_token)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestPasswordReset:
    def test_forgot_password_unknown_email_is_generic(self, client) -> None:
        response = client.post("/api/users/forgot-password", json={"email": "nobody@example.com"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["resetToken"] is None

    def test_forgot_password_stores_hashed_token(self, client, db_session, test_user: User) -> None:
        response = client.post("/api/users/forgot-password", json={"email": test_user.email})
        assert response.status_code == status.HTTP_200_OK

        db_session.refresh(test_user)
        assert test_user.reset_token_hash is not None
        assert test_user.reset_token_expires_at is not None

    def test_reset_password_round_trip(self, client, db_session, test_user: User, monkeypatch) -> None:
        monkeypatch.setattr(settings, "debug", True)
        token = client.post(
            "/api/users/forgot-password", json={"email": test_user.email}
        ).json()["resetToken"]
        assert token

        response = client.post(
            "/api/users/reset-password",
            json={"token": token, "password": "brand-new-pass"},
        )
        assert response.status_code == status.HTTP_200_OK

        login = client.post(
            "/api/users/login",
            json={"email": test_user.email, "password": "brand-new-pass"},
        )
        assert login.status_code == status.HTTP_200_OK

        reused = client.post(
            "/api/users/reset-password",
            json={"token": token, "password": "another-pass"},
        )
        assert reused.status_code == status.HTTP_400_BAD_REQUEST

    def test_reset_password_expired_token(self, client, db_session, test_user: User) -> None:
        test_user.reset_token_hash = hash_token("stale-token")
        test_user.reset_token_expires_at = datetime.now(UTC) - timedelta(minutes=1)
        db_session.commit()

        response = client.post(
            "/api/users/reset-password",
            json={"token": "stale-token", "password": "brand-new-pass"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid or expired reset token"
