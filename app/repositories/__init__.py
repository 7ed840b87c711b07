"""
app/repositories package marker.
"""

from app.repositories.base import (
    EventDirectory,
    MappingPreferenceStore,
    RegistrationPersistenceError,
    RegistrationStore,
    RegistrationStoreUnavailableError,
    TicketTypeDirectory,
)
from app.repositories.event_repository import EventRepository
from app.repositories.mapping_preference_repository import MappingPreferenceRepository
from app.repositories.registration_repository import RegistrationRepository

__all__ = [
    "EventDirectory",
    "EventRepository",
    "MappingPreferenceRepository",
    "MappingPreferenceStore",
    "RegistrationPersistenceError",
    "RegistrationRepository",
    "RegistrationStore",
    "RegistrationStoreUnavailableError",
    "TicketTypeDirectory",
]
