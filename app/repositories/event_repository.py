"""
app/repositories/event_repository.py

Read-only lookups of events and their ticket types.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.domain.attendee_import import EventInfo, TicketTypeInfo
from app.repositories.base import EventDirectory, TicketTypeDirectory
from db.models.event import Event, TicketType
from db.models.registration import Registration


def parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class EventRepository(EventDirectory, TicketTypeDirectory):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_event(self, event_id: str) -> EventInfo | None:
        parsed_id = parse_uuid(event_id)
        if parsed_id is None:
            return None
        event = self._session.get(Event, parsed_id)
        if event is None:
            return None
        return EventInfo(
            id=str(event.id),
            name=event.name,
            slug=event.slug,
            organizer_id=event.organizer_id,
            start_date=event.start_date,
        )

    def list_for_event(self, event_id: str) -> list[TicketTypeInfo]:
        parsed_id = parse_uuid(event_id)
        if parsed_id is None:
            return []

        sold = (
            select(
                Registration.ticket_type_id.label("ticket_type_id"),
                func.count(Registration.id).label("sold"),
            )
            .where(Registration.event_id == parsed_id)
            .group_by(Registration.ticket_type_id)
            .subquery()
        )
        stmt = (
            select(TicketType, func.coalesce(sold.c.sold, 0))
            .outerjoin(sold, sold.c.ticket_type_id == TicketType.id)
            .where(TicketType.event_id == parsed_id)
            .order_by(TicketType.created_at.asc())
        )
        return [
            TicketTypeInfo(
                id=str(ticket_type.id),
                name=ticket_type.name,
                capacity=ticket_type.quantity,
                sold=int(sold_count),
            )
            for ticket_type, sold_count in self._session.execute(stmt).all()
        ]
