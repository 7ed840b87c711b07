"""
db/models/import_mapping_preference.py

Remembered attendee-import field mappings, one per organizer and event.
"""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ImportMappingPreference(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "import_mapping_preferences"

    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Organizer who confirmed the mapping",
    )
    field_mapping_json: Mapped[dict[str, str | None]] = mapped_column(
        JSONB,
        nullable=False,
        comment="CSV column -> attendee field wire mapping",
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_import_mapping_preferences_event_user"),
        Index("ix_import_mapping_preferences_event_id", "event_id"),
    )
