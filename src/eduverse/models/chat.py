"""Models describing one-to-one chats between users."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eduverse.db.session import Base
from eduverse.db.time import new_id, utcnow


def pair_key(user_a: str, user_b: str) -> str:
    """Return the order-independent key for a pair of participants."""
    low, high = sorted((user_a, user_b))
    return f"{low}:{high}"


class Chat(Base):
    """Conversation between two participants.

    Each participant slot embeds a name/avatar snapshot. ``pair_key`` is
    unique so a pair of users never gets two chats.
    """

    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    pair_key: Mapped[str] = mapped_column(String(65), unique=True, nullable=False)

    user1_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    user1_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user1_image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    user2_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    user2_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user2_image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    last_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def has_participant(self, user_id: str) -> bool:
        """Return True if ``user_id`` occupies either slot."""
        return user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id: str) -> str:
        """Return the id of the participant that is not ``user_id``."""
        return self.user2_id if self.user1_id == user_id else self.user1_id
