"""
app/repositories/registration_repository.py

Persistence layer for imported attendee registrations.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.attendee_import import RegistrationInput
from app.repositories.base import (
    RegistrationPersistenceError,
    RegistrationStore,
    RegistrationStoreUnavailableError,
)
from db.models.registration import Registration

logger = logging.getLogger(__name__)

_LOOKUP_CHUNK_SIZE = 1000


class RegistrationRepository(RegistrationStore):
    """
    Registration store that commits every insert on its own.

    Each ``create`` call is its own transaction so that rows already imported
    stay committed when a later row fails.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_existing_emails(self, event_id: str, emails: Iterable[str]) -> set[str]:
        normalized = sorted({email.strip().lower() for email in emails if email.strip()})
        if not normalized:
            return set()

        found: set[str] = set()
        try:
            for start in range(0, len(normalized), _LOOKUP_CHUNK_SIZE):
                chunk = normalized[start : start + _LOOKUP_CHUNK_SIZE]
                stmt = select(func.lower(Registration.email)).where(
                    Registration.event_id == uuid.UUID(str(event_id)),
                    func.lower(Registration.email).in_(chunk),
                )
                found.update(self._session.scalars(stmt).all())
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RegistrationStoreUnavailableError("Unable to query existing registrations.") from exc
        return found

    def create(self, registration: RegistrationInput) -> uuid.UUID:
        record = Registration(
            event_id=uuid.UUID(str(registration.event_id)),
            ticket_type_id=uuid.UUID(str(registration.ticket_type_id)),
            email=registration.email,
            name=registration.name,
            payment_status=registration.payment_status,
            email_status=registration.email_status,
            custom_data=dict(registration.custom_data),
        )
        if registration.registered_at is not None:
            record.registered_at = registration.registered_at

        try:
            self._session.add(record)
            self._session.flush()
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.warning(
                "Registration insert failed event_id=%s email=%r error=%s",
                registration.event_id,
                registration.email,
                exc,
            )
            raise RegistrationPersistenceError(f"Failed to save registration: {exc.__class__.__name__}") from exc
        return record.id
