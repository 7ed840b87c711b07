"""
db/models/registration.py

Attendee registrations for an event.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, UUIDPrimaryKeyMixin


class RegistrationPaymentStatus:
    FREE = "free"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class RegistrationEmailStatus:
    ACTIVE = "active"
    BOUNCED = "bounced"
    UNSUBSCRIBED = "unsubscribed"


class Registration(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "registrations"

    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    ticket_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("ticket_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=RegistrationPaymentStatus.FREE,
    )
    email_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=RegistrationEmailStatus.ACTIVE,
    )
    custom_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Free-form attendee fields plus registrationCode",
    )
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("ix_registrations_event_id", "event_id"),
        Index("ix_registrations_ticket_type_id", "ticket_type_id"),
        Index("ix_registrations_event_id_email", "event_id", "email"),
        Index("ix_registrations_event_id_email_status", "event_id", "email_status"),
    )
