"""
SQLAlchemy ORM models for the LifeHub store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class StoreEntry(Base):
    """One named store (profile, measurements, goals, ...) as a JSON document."""

    __tablename__ = "store_entries"
    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<StoreEntry key={self.key} updated_at={self.updated_at}>"
