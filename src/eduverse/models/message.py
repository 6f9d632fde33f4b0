"""Models describing direct messages between users."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eduverse.db.session import Base
from eduverse.db.time import new_id, utcnow


class Message(Base):
    """Message exchanged inside a chat."""

    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    chat_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("chats.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    sender_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sender_image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    receiver_id: Mapped[str] = mapped_column(String(32), nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)
    attachments_id: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    reply_to_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
