"""SQLAlchemy models for identities and their course enrollments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduverse.db.session import Base
from eduverse.db.time import new_id, utcnow

ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_INSTRUCTOR, ROLE_ADMIN)


class User(Base):
    """Authoritative identity record.

    Posts, comments, chats and messages embed a copy of ``name`` and
    ``image_id``; see :mod:`eduverse.services.identity_sync`.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_STUDENT)
    level: Mapped[str] = mapped_column(Text, nullable=False, default="")
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Avatar reference: id of a row in ``files``.
    image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    reset_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    enrollments: Mapped[list[Enrollment]] = relationship(
        "Enrollment",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Enrollment.created_at",
    )

    @property
    def courses(self) -> list[str]:
        """Return the ids of courses this identity is enrolled in."""
        return [enrollment.course_id for enrollment in self.enrollments]

    @property
    def is_instructor(self) -> bool:
        """Return True for instructors and admins."""
        return self.role in (ROLE_INSTRUCTOR, ROLE_ADMIN)


class Enrollment(Base):
    """Membership of an identity in a course.

    The composite primary key keeps the enrollment set free of duplicates.
    """

    __tablename__ = "enrollments"

    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    course_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    user: Mapped[User] = relationship("User", back_populates="enrollments")
