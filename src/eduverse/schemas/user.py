"""User-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field, field_validator

from .common import CamelModel


class RegisterRequest(CamelModel):
    """Schema for account registration."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    level: str = Field("", max_length=100)
    role: Literal["student", "instructor"] = "student"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Store emails trimmed and lower-cased."""
        return v.strip().lower()


class LoginRequest(CamelModel):
    """Schema for login submissions."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Match the normalization applied at registration."""
        return v.strip().lower()


class ForgotPasswordRequest(CamelModel):
    """Request a password reset token."""

    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Redeem a password reset token."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=128)


class ProfileUpdateRequest(CamelModel):
    """Schema for updating user profile information.

    Omitted or null fields are left unchanged.
    """

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    level: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=2000)
    image_id: str | None = Field(None, description="Id of an uploaded avatar file")
    password: str | None = Field(None, min_length=6, max_length=128)


class UserResponse(CamelModel):
    """Public view of an identity."""

    id: str
    name: str
    email: str
    role: str
    level: str
    bio: str | None = None
    image_id: str | None = None
    courses: list[str] = Field(default_factory=list)
    created_at: datetime


class UserSummary(CamelModel):
    """Compact identity row used by search results."""

    id: str
    name: str
    email: str
    role: str
    level: str
    image_id: str | None = None


class AuthResponse(CamelModel):
    """Token and identity returned by register/login."""

    token: str
    user: UserResponse


class CurrentUserResponse(CamelModel):
    """Wrapper for ``GET /users/me``."""

    user: UserResponse


class ForgotPasswordResponse(CamelModel):
    """Acknowledgement for a reset request; the token is only echoed in debug mode."""

    message: str
    reset_token: str | None = None


class UserStats(CamelModel):
    """Activity counters for an identity."""

    posts: int
    comments: int
    reactions: int


class UserSearchResponse(CamelModel):
    """Identities matching a search."""

    users: list[UserSummary]
