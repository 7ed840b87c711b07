"""
app/repositories/mapping_preference_repository.py

Persistence helpers for remembered attendee-import field mappings.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.repositories.base import MappingPreferenceStore
from db.models.import_mapping_preference import ImportMappingPreference


class MappingPreferenceRepository(MappingPreferenceStore):
    """
    SQLAlchemy-backed mapping memory keyed by (event_id, user_id).
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, event_id: str, user_id: str) -> dict[str, str | None] | None:
        existing = self._find(event_id, user_id)
        if existing is None:
            return None
        return dict(existing.field_mapping_json)

    def set(self, event_id: str, user_id: str, mapping: dict[str, str | None]) -> None:
        """
        Insert or update the preference keyed by (event_id, user_id).
        """

        existing = self._find(event_id, user_id)
        if existing is None:
            existing = ImportMappingPreference(
                event_id=uuid.UUID(str(event_id)),
                user_id=user_id.strip(),
                field_mapping_json=mapping,
            )
            self._session.add(existing)
        else:
            existing.field_mapping_json = mapping

        self._session.flush()
        self._session.commit()

    def _find(self, event_id: str, user_id: str) -> ImportMappingPreference | None:
        stmt = select(ImportMappingPreference).where(
            ImportMappingPreference.event_id == uuid.UUID(str(event_id)),
            ImportMappingPreference.user_id == user_id.strip(),
        )
        return self._session.execute(stmt).scalars().first()
