"""SQLAlchemy models for courses and their instructors."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduverse.db.session import Base
from eduverse.models.user import User

DEFAULT_CAPACITY = 80

course_instructors = Table(
    "course_instructors",
    Base.metadata,
    Column(
        "course_id",
        String(64),
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Course(Base):
    """A course identified by a human-chosen code such as ``CS101``.

    ``enrolled`` mirrors the number of enrollment rows and is only changed
    through :mod:`eduverse.services.enrollment`.
    """

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("enrolled >= 0", name="ck_courses_enrolled_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    credit_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_CAPACITY)
    enrolled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    instructors: Mapped[list[User]] = relationship(
        "User",
        secondary=course_instructors,
        order_by="User.name",
    )

    @property
    def instructor_ids(self) -> list[str]:
        """Return the ids of the course instructors."""
        return [instructor.id for instructor in self.instructors]
