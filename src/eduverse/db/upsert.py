"""Dialect-specific INSERT statements supporting ON CONFLICT clauses."""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def conflict_insert(db: Session, model: type[Any]) -> Any:
    """Return an ``INSERT`` for ``model`` that understands ``on_conflict_*``.

    Raises:
        NotImplementedError: If the bound database is neither SQLite nor PostgreSQL.
    """
    dialect = db.get_bind().dialect.name
    table = model.__table__
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on {dialect!r}")
