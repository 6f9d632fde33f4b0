"""SQLAlchemy models for course posts."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eduverse.db.session import Base
from eduverse.db.time import new_id, utcnow

POST_TYPES = ("question", "announcement", "discussion", "event")


class Post(Base):
    """Primary content entity posted to a course.

    ``sender_name`` and ``sender_image_id`` are a snapshot of the author
    taken at creation time and refreshed by the profile fan-out.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    sender_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    sender_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sender_image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Plain code rather than a foreign key: posts outlive deleted courses.
    course_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="discussion")
    attachments_id: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    event_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    event_location: Mapped[str | None] = mapped_column(Text, nullable=True)
    answered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
