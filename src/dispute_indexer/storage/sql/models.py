"""SQLAlchemy ORM model for persisted entity documents.

Every entity type shares one ``entities`` table. The composite primary key
``(entity_type, entity_id)`` is the store key; ``data`` holds the entity's
JSON document (bytes fields base64-encoded).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


class EntityRecord(Base):
    """One stored entity.

    Saves replace ``data`` in place (UPDATE), so the row always reflects
    the latest state of the entity.
    """

    __tablename__ = "entities"

    entity_type: Mapped[str] = mapped_column(String(64), primary_key=True)
    entity_id: Mapped[str] = mapped_column(String(256), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False,
    )

    __table_args__ = (
        Index("ix_entities_entity_type", "entity_type"),
    )

    def __repr__(self) -> str:
        return f"<EntityRecord {self.entity_type}:{self.entity_id}>"
