# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-eduverse")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

from eduverse.core.security import create_access_token, hash_password
from eduverse.db.session import Base, enable_sqlite_foreign_keys
from eduverse.db.session import get_db as app_get_session
from eduverse.main import app as fastapi_app
from eduverse.models import Course, Post, User
from eduverse.models.user import ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_STUDENT
from eduverse.services.metrics import MetricsSink, get_metrics_sink

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret123"

_EMAIL_COUNTER = count(1)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def metrics_sink(app: FastAPI) -> Iterator[MetricsSink]:
    """Give every test its own empty metrics buffer."""
    sink = MetricsSink(capacity=50)
    app.dependency_overrides[get_metrics_sink] = lambda: sink
    try:
        yield sink
    finally:
        app.dependency_overrides.pop(get_metrics_sink, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with the shared test password."""

    def _make_user(
        name: str = "Test User",
        role: str = ROLE_STUDENT,
        email: str | None = None,
        level: str = "Level 1",
    ) -> User:
        user = User(
            name=name,
            email=email or f"user{next(_EMAIL_COUNTER)}@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
            level=level,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers carrying a token for ``user``."""
    token = create_access_token(user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary student."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second student."""
    return make_user("Other User")


@pytest.fixture()
def instructor(make_user: Callable[..., User]) -> User:
    return make_user("Dr. Instructor", role=ROLE_INSTRUCTOR, level="Faculty")


@pytest.fixture()
def admin(make_user: Callable[..., User]) -> User:
    return make_user("Admin", role=ROLE_ADMIN, level="Staff")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def instructor_token(instructor: User) -> dict[str, str]:
    return auth_headers(instructor)


@pytest.fixture()
def admin_token(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture()
def course(db_session: Session, instructor: User) -> Course:
    """Create a course taught by the instructor fixture."""
    course = Course(id="CS101", name="Intro to Programming", credit_hours=3, capacity=2)
    course.instructors.append(instructor)
    db_session.add(course)
    db_session.commit()
    db_session.refresh(course)
    return course


@pytest.fixture()
def test_post(db_session: Session, test_user: User, course: Course) -> Post:
    """Create a baseline discussion post by the primary user."""
    post = Post(
        sender_id=test_user.id,
        sender_name=test_user.name,
        sender_image_id=test_user.image_id,
        course_id=course.id,
        title="First post",
        body="Test post content",
        type="discussion",
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post

