"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.event import Event, TicketType
from db.models.import_mapping_preference import ImportMappingPreference
from db.models.registration import Registration

__all__ = [
    "Event",
    "TicketType",
    "Registration",
    "ImportMappingPreference",
]
