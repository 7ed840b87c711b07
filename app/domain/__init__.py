"""
app/domain package marker.
"""

from app.domain.attendee_import import (
    REQUIRED_FIELDS,
    CanonicalField,
    CustomField,
    DuplicateStrategy,
    FieldMapping,
    ImportOutcome,
    ImportStatus,
    ParsedFile,
    ParsedRow,
    ValidationReport,
)

__all__ = [
    "REQUIRED_FIELDS",
    "CanonicalField",
    "CustomField",
    "DuplicateStrategy",
    "FieldMapping",
    "ImportOutcome",
    "ImportStatus",
    "ParsedFile",
    "ParsedRow",
    "ValidationReport",
]
