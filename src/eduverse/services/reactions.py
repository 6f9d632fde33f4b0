"""Reaction upserts and per-post summaries."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eduverse.db.time import new_id, utcnow
from eduverse.db.upsert import conflict_insert
from eduverse.models import Reaction
from eduverse.models.reaction import REACTION_TYPES

__all__ = [
    "InvalidReactionType",
    "normalize_reaction_type",
    "upsert_reaction",
    "reaction_summary",
    "get_user_reaction",
]


class InvalidReactionType(ValueError):
    """Raised for a reaction type outside :data:`REACTION_TYPES`."""


def normalize_reaction_type(value: str) -> str:
    """Return the lower-cased reaction type or raise :class:`InvalidReactionType`."""
    normalized = value.strip().lower()
    if normalized not in REACTION_TYPES:
        raise InvalidReactionType("Invalid reaction type")
    return normalized


def upsert_reaction(db: Session, *, post_id: str, sender_id: str, reaction_type: str) -> Reaction:
    """Set the sender's reaction on a post, replacing any earlier one.

    A single ``INSERT ... ON CONFLICT DO UPDATE`` against the
    ``(post_id, sender_id)`` unique constraint, so concurrent calls cannot
    leave two rows for the pair. The caller commits.
    """
    reaction_type = normalize_reaction_type(reaction_type)
    now = utcnow()
    stmt = conflict_insert(db, Reaction).values(
        id=new_id(),
        post_id=post_id,
        sender_id=sender_id,
        type=reaction_type,
        created_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["post_id", "sender_id"],
        set_={"type": reaction_type, "created_at": now},
    )
    db.execute(stmt)
    return db.execute(
        select(Reaction)
        .where(Reaction.post_id == post_id, Reaction.sender_id == sender_id)
        .execution_options(populate_existing=True)
    ).scalar_one()


def reaction_summary(db: Session, post_id: str) -> dict[str, int]:
    """Return counts for every reaction type on a post, zeros included."""
    counts = dict.fromkeys(REACTION_TYPES, 0)
    rows = db.execute(
        select(Reaction.type, func.count())
        .where(Reaction.post_id == post_id)
        .group_by(Reaction.type)
    ).all()
    for reaction_type, count in rows:
        counts[reaction_type] = int(count)
    return counts


def get_user_reaction(db: Session, *, post_id: str, sender_id: str | None) -> str | None:
    """Return the type of ``sender_id``'s reaction on the post, if any."""
    if sender_id is None:
        return None
    return db.execute(
        select(Reaction.type).where(
            Reaction.post_id == post_id,
            Reaction.sender_id == sender_id,
        )
    ).scalar_one_or_none()
