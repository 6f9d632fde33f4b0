"""Keep embedded identity snapshots consistent with the users table.

Posts, comments, messages and both participant slots of a chat store a copy
of the author's ``name`` and ``image_id`` so list endpoints can render
without joins. Two mechanisms keep those copies honest:

* :func:`propagate_profile_change` rewrites every stored copy when a profile
  changes. It runs inside the profile update transaction.
* :class:`IdentityReconciler` overlays the current identity onto copies at
  response time, so a response is correct even for rows written with a stale
  snapshot by a request that raced the fan-out.

Every endpoint that returns snapshots goes through the reconciler.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from eduverse.models import Chat, Comment, Message, Post, User
from eduverse.schemas.common import SenderSnapshot

logger = logging.getLogger(__name__)

# Models carrying a ``sender_*`` snapshot.
_SENDER_MODELS: tuple[type[Any], ...] = (Post, Comment, Message)


def propagate_profile_change(
    db: Session,
    user: User,
    *,
    name_changed: bool,
    image_changed: bool,
) -> dict[str, int]:
    """Rewrite every stored snapshot of ``user``.

    Args:
        db: Session holding the profile update; the caller commits.
        user: Identity whose current ``name``/``image_id`` should be copied.
        name_changed: Whether the display name was edited.
        image_changed: Whether the avatar reference was edited.

    Returns:
        Rows touched per table. Empty if nothing relevant changed.
    """
    if not (name_changed or image_changed):
        return {}

    sender_values: dict[str, Any] = {}
    if name_changed:
        sender_values["sender_name"] = user.name
    if image_changed:
        sender_values["sender_image_id"] = user.image_id

    counts: dict[str, int] = {}
    for model in _SENDER_MODELS:
        result = db.execute(
            update(model)
            .where(model.sender_id == user.id)
            .values(**sender_values)
            .execution_options(synchronize_session="evaluate")
        )
        counts[model.__tablename__] = result.rowcount or 0

    chat_rows = 0
    for slot in ("user1", "user2"):
        slot_values: dict[str, Any] = {}
        if name_changed:
            slot_values[f"{slot}_name"] = user.name
        if image_changed:
            slot_values[f"{slot}_image_id"] = user.image_id
        result = db.execute(
            update(Chat)
            .where(getattr(Chat, f"{slot}_id") == user.id)
            .values(**slot_values)
            .execution_options(synchronize_session="evaluate")
        )
        chat_rows += result.rowcount or 0
    counts[Chat.__tablename__] = chat_rows

    logger.info("Propagated profile change for user %s: %s", user.id, counts)
    return counts


class IdentityReconciler:
    """Overlay current identity fields onto stored snapshots.

    Identities are fetched in bulk and cached for the lifetime of the
    instance, which is one response. Nothing is written back.
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._identities: dict[str, tuple[str, str | None]] = {}
        self._missing: set[str] = set()

    def load(self, user_ids: Iterable[str | None]) -> None:
        """Fetch identities for ``user_ids`` not already known, in one query."""
        wanted = {
            user_id
            for user_id in user_ids
            if user_id and user_id not in self._identities and user_id not in self._missing
        }
        if not wanted:
            return
        rows = self._db.execute(
            select(User.id, User.name, User.image_id).where(User.id.in_(wanted))
        ).all()
        for user_id, name, image_id in rows:
            self._identities[user_id] = (name, image_id)
        self._missing.update(wanted - self._identities.keys())

    def resolve(self, user_id: str, name: str, image_id: str | None) -> SenderSnapshot:
        """Return the current identity, or the stored copy if the user is gone."""
        if user_id not in self._identities and user_id not in self._missing:
            self.load([user_id])
        current = self._identities.get(user_id)
        if current is None:
            return SenderSnapshot(id=user_id, name=name, image_id=image_id)
        return SenderSnapshot(id=user_id, name=current[0], image_id=current[1])

    def snapshot(self, record: Any, prefix: str = "sender") -> SenderSnapshot:
        """Resolve the ``<prefix>_id/_name/_image_id`` snapshot stored on ``record``."""
        return self.resolve(
            getattr(record, f"{prefix}_id"),
            getattr(record, f"{prefix}_name"),
            getattr(record, f"{prefix}_image_id"),
        )
