"""
app/repositories/base.py

Collaborator interfaces consumed by the attendee import pipeline.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.domain.attendee_import import EventInfo, RegistrationInput, TicketTypeInfo


class RegistrationPersistenceError(RuntimeError):
    """
    Raised when one registration cannot be stored.
    """


class RegistrationStoreUnavailableError(RuntimeError):
    """
    Raised when the registration store cannot be queried at all.
    """


class EventDirectory(ABC):
    @abstractmethod
    def get_event(self, event_id: str) -> EventInfo | None:
        """
        Return the event or ``None`` when it does not exist.
        """


class TicketTypeDirectory(ABC):
    @abstractmethod
    def list_for_event(self, event_id: str) -> list[TicketTypeInfo]:
        """
        Return every ticket type of one event with its sold count.
        """


class RegistrationStore(ABC):
    """
    Storage abstraction for attendee registrations.
    """

    @abstractmethod
    def find_existing_emails(self, event_id: str, emails: Iterable[str]) -> set[str]:
        """
        Return the lowercased subset of ``emails`` already registered for the event.
        """

    @abstractmethod
    def create(self, registration: RegistrationInput) -> uuid.UUID | str:
        """
        Persist one registration durably and return its id.
        """


class MappingPreferenceStore(ABC):
    """
    Per event+user memory of the last confirmed field mapping.
    """

    @abstractmethod
    def get(self, event_id: str, user_id: str) -> dict[str, str | None] | None:
        """
        Return the remembered wire mapping, if any.
        """

    @abstractmethod
    def set(self, event_id: str, user_id: str, mapping: dict[str, str | None]) -> None:
        """
        Remember a wire mapping, replacing any previous one.
        """
