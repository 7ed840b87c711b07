"""
app/schemas/attendee_import.py

Request and response schemas for the attendee import endpoints.

Request bodies accept both camelCase (``fileContent``) and snake_case
(``file_content``) keys. Responses are snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.attendee_import import DuplicateStrategy, ImportStatus


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ParseImportRequest(_CamelRequest):
    file_content: str
    file_name: str | None = None


class ValidateImportRequest(_CamelRequest):
    file_content: str
    field_mapping: dict[str, str | None]
    duplicate_strategy: DuplicateStrategy = DuplicateStrategy.SKIP


class ExecuteImportRequest(ValidateImportRequest):
    send_confirmation_emails: bool = False


class FieldMappingRequest(_CamelRequest):
    field_mapping: dict[str, str | None]


class FailureRowPayload(_CamelRequest):
    row: int = Field(..., ge=1)
    field: str = ""
    value: str = ""
    message: str
    values: dict[str, str] = Field(default_factory=dict)


class FailureReportRequest(_CamelRequest):
    columns: list[str]
    failures: list[FailureRowPayload] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PreviewRowResponse(BaseModel):
    row: int = Field(..., ge=1)
    values: dict[str, str]


class ParseImportResponse(BaseModel):
    """
    Columns, a short preview, and a suggested column -> field mapping.
    """

    file_name: str | None = None
    columns: list[str]
    preview: list[PreviewRowResponse] = Field(default_factory=list)
    total_rows: int = Field(..., ge=0)
    size_bytes: int = Field(..., ge=0)
    suggested_mapping: dict[str, str] = Field(default_factory=dict)


class ImportRowErrorResponse(BaseModel):
    row: int = Field(..., ge=1)
    field: str
    value: str
    message: str
    type: str


class ImportWarningResponse(BaseModel):
    field: str
    value: str
    message: str


class ValidationReportResponse(BaseModel):
    total_rows: int = Field(..., ge=0)
    valid_rows: int = Field(..., ge=0)
    invalid_rows: int = Field(..., ge=0)
    in_file_duplicates: int = Field(..., ge=0)
    database_duplicates: int = Field(..., ge=0)
    duplicates: int = Field(..., ge=0)
    errors: list[ImportRowErrorResponse] = Field(default_factory=list)
    warnings: list[ImportWarningResponse] = Field(default_factory=list)


class RowFailureResponse(BaseModel):
    row: int = Field(..., ge=1)
    field: str
    value: str
    message: str
    values: dict[str, str] = Field(default_factory=dict)


class CreatedRegistrationResponse(BaseModel):
    row: int = Field(..., ge=1)
    registration_id: str
    registration_code: str
    email: str


class ImportOutcomeResponse(BaseModel):
    """
    Result of one execute call. ``success_count + failure_count + skipped_count``
    equals the number of data rows in the file.
    """

    status: ImportStatus
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)
    skipped_count: int = Field(..., ge=0)
    failures: list[RowFailureResponse] = Field(default_factory=list)
    created: list[CreatedRegistrationResponse] = Field(default_factory=list)
    emails_sent: int = Field(default=0, ge=0)
    emails_failed: int = Field(default=0, ge=0)


class FieldMappingResponse(BaseModel):
    event_id: str
    field_mapping: dict[str, str | None] | None = None
