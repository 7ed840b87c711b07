"""
app/schemas package marker.
"""

from app.schemas.attendee_import import (
    ExecuteImportRequest,
    FailureReportRequest,
    FieldMappingRequest,
    FieldMappingResponse,
    ImportOutcomeResponse,
    ParseImportRequest,
    ParseImportResponse,
    ValidateImportRequest,
    ValidationReportResponse,
)

__all__ = [
    "ExecuteImportRequest",
    "FailureReportRequest",
    "FieldMappingRequest",
    "FieldMappingResponse",
    "ImportOutcomeResponse",
    "ParseImportRequest",
    "ParseImportResponse",
    "ValidateImportRequest",
    "ValidationReportResponse",
]
