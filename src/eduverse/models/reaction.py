"""Models capturing reactions on posts."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eduverse.db.session import Base
from eduverse.db.time import new_id, utcnow

REACTION_TYPES = ("like", "love", "shocked", "laugh", "sad")


class Reaction(Base):
    """Per-user reaction on a post."""

    __tablename__ = "reactions"
    __table_args__ = (
        # One reaction per (post, sender); upserts target this constraint.
        UniqueConstraint("post_id", "sender_id", name="uq_reactions_post_sender"),
        CheckConstraint(
            "type IN ('like', 'love', 'shocked', 'laugh', 'sad')",
            name="ck_reactions_type",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
