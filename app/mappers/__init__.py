"""
app/mappers package marker.
"""

from app.mappers.field_mapping_advisor import SUGGESTION_PATTERNS, FieldMappingAdvisor

__all__ = [
    "SUGGESTION_PATTERNS",
    "FieldMappingAdvisor",
]
