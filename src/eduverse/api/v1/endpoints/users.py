"""Account, profile and instructor report endpoints."""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, or_, select

from eduverse.core.security import (
    create_access_token,
    hash_password,
    hash_token,
    verify_password,
)
from eduverse.core.settings import settings
from eduverse.models import Comment, Course, Enrollment, Post, Reaction, User
from eduverse.schemas.common import Pagination, StatusMessage
from eduverse.schemas.course import CourseListResponse, CourseResponse
from eduverse.schemas.post import UserPostsResponse
from eduverse.schemas.report import (
    CourseEngagementReport,
    CoursePerformanceReport,
    ReactionDistributionReport,
    TopContributorsReport,
)
from eduverse.schemas.user import (
    AuthResponse,
    CurrentUserResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
    UserSearchResponse,
    UserStats,
    UserSummary,
)
from eduverse.services import reports
from eduverse.services.identity_sync import propagate_profile_change

from ..dependencies import CurrentUserDep, InstructorDep, SessionDep
from ..serializers import serialize_posts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

MAX_SEARCH_RESULTS = 50
MAX_PAGE_SIZE = 50
FORGOT_PASSWORD_MESSAGE = "If that email is registered, a reset link has been sent"


def _issue_token(user: User) -> str:
    return create_access_token(user.id, email=user.email, role=user.role)


def _get_user_or_404(db: SessionDep, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _escape_like(term: str) -> str:
    """Make ``%`` and ``_`` in user input match literally under ``escape="\\"``."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _email_taken(db: SessionDep, email: str, *, exclude_id: str | None = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.execute(stmt).first() is not None


def _apply_profile_update(db: SessionDep, user: User, update: ProfileUpdateRequest) -> User:
    """Apply a profile edit and fan the new identity out in one transaction."""
    if update.email is not None:
        email = update.email.strip().lower()
        if email != user.email and _email_taken(db, email, exclude_id=user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")
        user.email = email

    name_changed = update.name is not None and update.name != user.name
    image_changed = update.image_id is not None and update.image_id != user.image_id
    if update.name is not None:
        user.name = update.name
    if update.image_id is not None:
        user.image_id = update.image_id
    if update.level is not None:
        user.level = update.level
    if update.bio is not None:
        user.bio = update.bio
    if update.password is not None:
        user.password_hash = hash_password(update.password)

    db.flush()
    propagate_profile_change(db, user, name_changed=name_changed, image_changed=image_changed)
    db.commit()
    db.refresh(user)
    return user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: SessionDep) -> AuthResponse:
    """Create an account and return a bearer token for it."""
    if _email_taken(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        level=payload.level,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s user %s", user.role, user.id)
    return AuthResponse(token=_issue_token(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: SessionDep) -> AuthResponse:
    """Exchange credentials for a bearer token."""
    user = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return AuthResponse(token=_issue_token(user), user=UserResponse.model_validate(user))


@router.get("/me", response_model=CurrentUserResponse)
async def read_me(current_user: CurrentUserDep) -> CurrentUserResponse:
    """Return the authenticated identity."""
    return CurrentUserResponse(user=UserResponse.model_validate(current_user))


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(payload: ForgotPasswordRequest, db: SessionDep) -> ForgotPasswordResponse:
    """Issue a single-use reset token.

    The reply is identical whether or not the address is registered. The raw
    token is only echoed back when ``DEBUG`` is enabled since no mail is sent.
    """
    email = payload.email.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)

    token = secrets.token_urlsafe(32)
    user.reset_token_hash = hash_token(token)
    user.reset_token_expires_at = datetime.now(UTC) + timedelta(
        minutes=settings.password_reset_expire_minutes
    )
    db.commit()
    logger.info("Password reset requested for user %s", user.id)
    return ForgotPasswordResponse(
        message=FORGOT_PASSWORD_MESSAGE,
        reset_token=token if settings.debug else None,
    )


@router.post("/reset-password", response_model=StatusMessage)
async def reset_password(payload: ResetPasswordRequest, db: SessionDep) -> StatusMessage:
    """Redeem a reset token and set a new password."""
    user = db.execute(
        select(User).where(User.reset_token_hash == hash_token(payload.token))
    ).scalar_one_or_none()
    expires_at = user.reset_token_expires_at if user else None
    if expires_at is not None and expires_at.tzinfo is None:
        # SQLite hands back naive datetimes.
        expires_at = expires_at.replace(tzinfo=UTC)
    if user is None or expires_at is None or expires_at < datetime.now(UTC):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )

    user.password_hash = hash_password(payload.password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.commit()
    logger.info("Password reset for user %s", user.id)
    return StatusMessage(message="Password has been reset")


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    current_user: CurrentUserDep,
    db: SessionDep,
    query: str = Query("", description="Name or email fragment"),
    role: str | None = Query(None),
    limit: int = Query(20, ge=1),
) -> UserSearchResponse:
    """Find other identities by name or email."""
    term = query.strip()
    if len(term) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query must be at least 2 characters",
        )

    pattern = f"%{_escape_like(term.lower())}%"
    stmt = select(User).where(
        User.id != current_user.id,
        or_(
            func.lower(User.name).like(pattern, escape="\\"),
            func.lower(User.email).like(pattern, escape="\\"),
        ),
    )
    if role:
        stmt = stmt.where(User.role == role)
    users = db.scalars(stmt.order_by(User.name).limit(min(limit, MAX_SEARCH_RESULTS))).all()
    return UserSearchResponse(users=[UserSummary.model_validate(user) for user in users])


@router.put("/profile", response_model=CurrentUserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CurrentUserResponse:
    """Update the caller's profile."""
    user = _apply_profile_update(db, current_user, payload)
    return CurrentUserResponse(user=UserResponse.model_validate(user))


@router.get("/report", response_model=TopContributorsReport)
async def top_contributors_report(_: InstructorDep, db: SessionDep) -> TopContributorsReport:
    """Leaderboard of the ten most active identities."""
    return TopContributorsReport(report=reports.top_contributors(db))


@router.get("/report2", response_model=CourseEngagementReport)
async def course_engagement_report(_: InstructorDep, db: SessionDep) -> CourseEngagementReport:
    """Engagement per course code."""
    return CourseEngagementReport(report=reports.course_engagement(db))


@router.get("/report3", response_model=ReactionDistributionReport)
async def reaction_distribution_report(
    _: InstructorDep, db: SessionDep
) -> ReactionDistributionReport:
    """Usage of each reaction type."""
    return ReactionDistributionReport(report=reports.reaction_distribution(db))


@router.get("/report4", response_model=CoursePerformanceReport)
async def course_performance_report(
    current_user: InstructorDep,
    db: SessionDep,
    mine: bool = Query(False, description="Only courses taught by the caller"),
) -> CoursePerformanceReport:
    """Enrollment and engagement per course."""
    instructor_id = current_user.id if mine else None
    return CoursePerformanceReport(
        report=reports.course_performance(db, instructor_id=instructor_id)
    )


@router.get("/{user_id}", response_model=CurrentUserResponse)
async def read_user(user_id: str, db: SessionDep) -> CurrentUserResponse:
    """Return a single identity."""
    return CurrentUserResponse(user=UserResponse.model_validate(_get_user_or_404(db, user_id)))


@router.put("/{user_id}", response_model=CurrentUserResponse)
async def update_user(
    user_id: str,
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CurrentUserResponse:
    """Update a profile; identities may only edit themselves."""
    if user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to update this user",
        )
    user = _apply_profile_update(db, current_user, payload)
    return CurrentUserResponse(user=UserResponse.model_validate(user))


@router.get("/{user_id}/posts", response_model=UserPostsResponse)
async def read_user_posts(
    user_id: str,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
) -> UserPostsResponse:
    """Posts authored by an identity, newest first."""
    _get_user_or_404(db, user_id)
    limit = min(limit, MAX_PAGE_SIZE)
    total = db.scalar(select(func.count()).select_from(Post).where(Post.sender_id == user_id)) or 0
    posts = db.scalars(
        select(Post)
        .where(Post.sender_id == user_id)
        .order_by(Post.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return UserPostsResponse(
        posts=serialize_posts(db, posts),
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{user_id}/courses", response_model=CourseListResponse)
async def read_user_courses(
    user_id: str, db: SessionDep
) -> CourseListResponse:
    """Courses an instructor teaches, or a student is enrolled in."""
    user = _get_user_or_404(db, user_id)
    if user.is_instructor:
        stmt = select(Course).where(Course.instructors.any(User.id == user.id))
    else:
        stmt = (
            select(Course)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .where(Enrollment.user_id == user.id)
        )
    courses = db.scalars(stmt.order_by(Course.id)).all()
    return CourseListResponse(courses=[CourseResponse.model_validate(course) for course in courses])


@router.get("/{user_id}/stats", response_model=UserStats)
async def read_user_stats(user_id: str, db: SessionDep) -> UserStats:
    """Activity counters for an identity."""
    _get_user_or_404(db, user_id)

    def count(model: type[Any]) -> int:
        return db.scalar(
            select(func.count()).select_from(model).where(model.sender_id == user_id)
        ) or 0

    return UserStats(posts=count(Post), comments=count(Comment), reactions=count(Reaction))
