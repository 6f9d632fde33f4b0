"""SQLAlchemy models for post comments."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eduverse.db.session import Base
from eduverse.db.time import new_id, utcnow


class Comment(Base):
    """Reply attached to a post, carrying a sender snapshot like posts do."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    sender_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sender_image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    # Threading is stored but not rendered by the client.
    parent_comment_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
