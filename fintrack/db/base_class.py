# fintrack/db/base_class.py
from __future__ import annotations

"""
# Finance Tracker — SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (stable constraint names across backends)
- Helpful `__repr__` for debugging
- Common mixins:
  - `UUIDPKMixin` — portable UUID primary key (native on Postgres, CHAR(32) on SQLite)
  - `CreatedAtMixin` — `created_at` (UTC, server-side)

Usage:
    from fintrack.db.base_class import Base, UUIDPKMixin, CreatedAtMixin

    class Wallet(UUIDPKMixin, CreatedAtMixin, Base):
        __tablename__ = "wallets"
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Global declarative base for Finance Tracker models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:  # pragma: no cover
        attrs = [f"{key}={getattr(self, key)!r}" for key in ("id", "name", "user_id") if hasattr(self, key)]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


class UUIDPKMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


__all__ = ["Base", "UUIDPKMixin", "CreatedAtMixin", "NAMING_CONVENTION", "as_utc"]
