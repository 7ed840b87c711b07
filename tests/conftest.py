"""
tests/conftest.py

In-memory collaborators shared by the attendee import tests.
"""

from __future__ import annotations

import itertools
import uuid
from collections.abc import Iterable

import pytest

from app.config import AttendeeImportSettings
from app.connectors.email_sender import EmailDeliveryError, EmailMessage, EmailSender
from app.domain.attendee_import import EventInfo, RegistrationInput, TicketTypeInfo
from app.repositories.base import (
    EventDirectory,
    MappingPreferenceStore,
    RegistrationPersistenceError,
    RegistrationStore,
    RegistrationStoreUnavailableError,
    TicketTypeDirectory,
)
from app.services.attendee_import_service import AttendeeImportService, ImportCollaborators

EVENT_ID = "0b6f7d4e-2f4a-4a4e-9d8e-5f0c1a2b3c4d"
ORGANIZER_ID = "organizer-1"


class InMemoryEvents(EventDirectory, TicketTypeDirectory):
    def __init__(self, events: Iterable[EventInfo], ticket_types: dict[str, list[TicketTypeInfo]]) -> None:
        self.events = {event.id: event for event in events}
        self.ticket_types = ticket_types

    def get_event(self, event_id: str) -> EventInfo | None:
        return self.events.get(event_id)

    def list_for_event(self, event_id: str) -> list[TicketTypeInfo]:
        return list(self.ticket_types.get(event_id, []))


class InMemoryRegistrations(RegistrationStore):
    """
    Registration store whose failures can be scripted per email.
    """

    def __init__(self, existing: Iterable[str] = ()) -> None:
        self.existing = {email.lower() for email in existing}
        self.created: list[RegistrationInput] = []
        self.fail_for: set[str] = set()
        self.unavailable = False
        self.lookups = 0
        self._ids = itertools.count(1)

    def find_existing_emails(self, event_id: str, emails: Iterable[str]) -> set[str]:
        self.lookups += 1
        if self.unavailable:
            raise RegistrationStoreUnavailableError("Registration store is unavailable.")
        return {email.lower() for email in emails if email.lower() in self.existing}

    def create(self, registration: RegistrationInput) -> uuid.UUID:
        if registration.email in self.fail_for:
            raise RegistrationPersistenceError("Failed to save registration: IntegrityError")
        self.created.append(registration)
        return uuid.UUID(int=next(self._ids))


class InMemoryMappingPreferences(MappingPreferenceStore):
    def __init__(self) -> None:
        self.saved: dict[tuple[str, str], dict[str, str | None]] = {}

    def get(self, event_id: str, user_id: str) -> dict[str, str | None] | None:
        return self.saved.get((event_id, user_id))

    def set(self, event_id: str, user_id: str, mapping: dict[str, str | None]) -> None:
        self.saved[(event_id, user_id)] = dict(mapping)


class RecordingEmailSender(EmailSender):
    def __init__(self, fail_for: Iterable[str] = ()) -> None:
        self.sent: list[EmailMessage] = []
        self.fail_for = set(fail_for)

    def send(self, message: EmailMessage) -> str:
        if message.to in self.fail_for:
            raise EmailDeliveryError("Email provider rejected the message.")
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


@pytest.fixture()
def event() -> EventInfo:
    return EventInfo(id=EVENT_ID, name="PyCon Test", slug="pycon-test", organizer_id=ORGANIZER_ID)


@pytest.fixture()
def ticket_types() -> list[TicketTypeInfo]:
    return [
        TicketTypeInfo(id="tt-ga", name="General Admission", capacity=500, sold=0),
        TicketTypeInfo(id="tt-vip", name="VIP", capacity=2, sold=1),
    ]


@pytest.fixture()
def events(event: EventInfo, ticket_types: list[TicketTypeInfo]) -> InMemoryEvents:
    return InMemoryEvents([event], {event.id: ticket_types})


@pytest.fixture()
def registrations() -> InMemoryRegistrations:
    return InMemoryRegistrations()


@pytest.fixture()
def mapping_preferences() -> InMemoryMappingPreferences:
    return InMemoryMappingPreferences()


@pytest.fixture()
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture()
def collaborators(
    events: InMemoryEvents,
    registrations: InMemoryRegistrations,
    mapping_preferences: InMemoryMappingPreferences,
) -> ImportCollaborators:
    return ImportCollaborators(
        events=events,
        ticket_types=events,
        registrations=registrations,
        mapping_preferences=mapping_preferences,
    )


@pytest.fixture()
def import_service(email_sender: RecordingEmailSender) -> AttendeeImportService:
    return AttendeeImportService(
        settings=AttendeeImportSettings(),
        email_sender=email_sender,
        app_url="https://events.example.com",
    )


@pytest.fixture()
def standard_mapping() -> dict[str, str | None]:
    return {"Name": "name", "Email": "email", "Ticket": "ticketType"}
