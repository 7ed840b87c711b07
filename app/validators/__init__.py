"""
app/validators package marker.
"""

from app.validators.duplicate_detector import DuplicateDetector
from app.validators.mapping_validator import MappingErrorDetail, MappingValidator, SchemaMappingError
from app.validators.row_validator import AttendeeRowValidator

__all__ = [
    "AttendeeRowValidator",
    "DuplicateDetector",
    "MappingErrorDetail",
    "MappingValidator",
    "SchemaMappingError",
]
