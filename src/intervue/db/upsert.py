"""Dialect-aware INSERT constructs for ON CONFLICT statements.

PostgreSQL and SQLite both support ``INSERT ... ON CONFLICT`` with the same
SQLAlchemy API, but through different ``insert`` constructs.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def insert_for(db: AsyncSession, model: Any) -> Any:  # noqa: ANN401
    """Return an ``insert`` construct supporting ``on_conflict_*`` for the session's dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    msg = f"Unsupported database dialect for upserts: {dialect}"
    raise RuntimeError(msg)
