"""Chat lookup and creation keyed by participant pair."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from eduverse.db.time import new_id, utcnow
from eduverse.db.upsert import conflict_insert
from eduverse.models import Chat, User
from eduverse.models.chat import pair_key

logger = logging.getLogger(__name__)

__all__ = ["find_chat", "find_or_create_chat", "touch_chat"]

_PREVIEW_LENGTH = 100


def find_chat(db: Session, user_a: str, user_b: str) -> Chat | None:
    """Return the chat between two users regardless of slot order."""
    return db.execute(
        select(Chat).where(Chat.pair_key == pair_key(user_a, user_b))
    ).scalar_one_or_none()


def find_or_create_chat(db: Session, initiator: User, other: User) -> tuple[Chat, bool]:
    """Return the pair's chat, creating it with ``initiator`` as ``user1``.

    Creation is ``INSERT ... ON CONFLICT (pair_key) DO NOTHING`` followed by a
    select, so two racing first messages converge on one row.

    Returns:
        The chat and whether this call inserted it.
    """
    key = pair_key(initiator.id, other.id)
    existing = find_chat(db, initiator.id, other.id)
    if existing is not None:
        return existing, False

    stmt = conflict_insert(db, Chat).values(
        id=new_id(),
        pair_key=key,
        user1_id=initiator.id,
        user1_name=initiator.name,
        user1_image_id=initiator.image_id,
        user2_id=other.id,
        user2_name=other.name,
        user2_image_id=other.image_id,
        last_message="",
        updated_at=utcnow(),
    ).on_conflict_do_nothing(index_elements=["pair_key"])
    result = db.execute(stmt)
    created = bool(result.rowcount)

    chat = db.execute(select(Chat).where(Chat.pair_key == key)).scalar_one()
    if created:
        logger.info("Created chat %s between %s and %s", chat.id, initiator.id, other.id)
    return chat, created


def touch_chat(chat: Chat, text: str) -> None:
    """Record ``text`` as the chat's latest message preview."""
    chat.last_message = text[:_PREVIEW_LENGTH]
    chat.updated_at = utcnow()
