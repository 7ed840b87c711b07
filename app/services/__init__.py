"""
app/services package marker.
"""

from app.services.attendee_import_service import (
    AttendeeImportService,
    EventAccessDeniedError,
    EventNotFoundError,
    ImportCollaborators,
    get_attendee_import_service,
)
from app.services.failure_report import build_failure_report, build_import_template
from app.services.import_executor import ImportExecutor

__all__ = [
    "AttendeeImportService",
    "EventAccessDeniedError",
    "EventNotFoundError",
    "ImportCollaborators",
    "ImportExecutor",
    "build_failure_report",
    "build_import_template",
    "get_attendee_import_service",
]
