"""
app/api/dependencies.py

Shared FastAPI dependencies for caller identity and request-scoped stores.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.repositories.event_repository import EventRepository
from app.repositories.mapping_preference_repository import MappingPreferenceRepository
from app.repositories.registration_repository import RegistrationRepository
from app.services.attendee_import_service import ImportCollaborators
from db.session import get_db


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Return the authenticated caller id forwarded by the gateway.
    """

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
        )
    return user_id


def get_import_collaborators(db: Session = Depends(get_db)) -> ImportCollaborators:
    events = EventRepository(db)
    return ImportCollaborators(
        events=events,
        ticket_types=events,
        registrations=RegistrationRepository(db),
        mapping_preferences=MappingPreferenceRepository(db),
    )
