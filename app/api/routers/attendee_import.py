"""
app/api/routers/attendee_import.py

Attendee CSV import HTTP endpoints.
"""

from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.dependencies import get_current_user_id, get_import_collaborators
from app.domain.attendee_import import ImportOutcome, RowFailure, ValidationReport
from app.parsers.csv_parser import CSVParseError
from app.repositories.base import RegistrationStoreUnavailableError
from app.schemas.attendee_import import (
    CreatedRegistrationResponse,
    ExecuteImportRequest,
    FailureReportRequest,
    FieldMappingRequest,
    FieldMappingResponse,
    ImportOutcomeResponse,
    ImportRowErrorResponse,
    ImportWarningResponse,
    ParseImportRequest,
    ParseImportResponse,
    PreviewRowResponse,
    RowFailureResponse,
    ValidateImportRequest,
    ValidationReportResponse,
)
from app.services.attendee_import_service import (
    AttendeeImportService,
    EventAccessDeniedError,
    EventNotFoundError,
    ImportCollaborators,
    get_attendee_import_service,
)
from app.services.failure_report import build_failure_report, build_import_template
from app.validators.mapping_validator import SchemaMappingError

router = APIRouter(tags=["attendee-import"])

_PREFIX = "/events/{event_id}/attendee-import"
_CSV_MEDIA_TYPE = "text/csv"


def _raise_http_error(exc: Exception) -> NoReturn:
    """
    Translate service exceptions into HTTP errors.
    """

    if isinstance(exc, EventNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, EventAccessDeniedError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, CSVParseError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    if isinstance(exc, SchemaMappingError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    if isinstance(exc, RegistrationStoreUnavailableError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Registration store is unavailable.",
        ) from exc
    raise exc


_HANDLED_ERRORS = (
    EventNotFoundError,
    EventAccessDeniedError,
    CSVParseError,
    SchemaMappingError,
    RegistrationStoreUnavailableError,
)


def _report_response(report: ValidationReport) -> ValidationReportResponse:
    return ValidationReportResponse(
        total_rows=report.total_rows,
        valid_rows=report.valid_rows,
        invalid_rows=report.invalid_rows,
        in_file_duplicates=report.in_file_duplicates,
        database_duplicates=report.database_duplicates,
        duplicates=report.duplicates,
        errors=[
            ImportRowErrorResponse(
                row=error.row,
                field=error.field,
                value=error.value,
                message=error.message,
                type=error.type.value,
            )
            for error in report.errors
        ],
        warnings=[
            ImportWarningResponse(field=warning.field, value=warning.value, message=warning.message)
            for warning in report.warnings
        ],
    )


def _outcome_response(outcome: ImportOutcome) -> ImportOutcomeResponse:
    return ImportOutcomeResponse(
        status=outcome.status,
        success_count=outcome.success_count,
        failure_count=outcome.failure_count,
        skipped_count=outcome.skipped_count,
        failures=[
            RowFailureResponse(
                row=failure.row,
                field=failure.field,
                value=failure.value,
                message=failure.message,
                values=dict(failure.values),
            )
            for failure in outcome.failures
        ],
        created=[
            CreatedRegistrationResponse(
                row=created.row,
                registration_id=str(created.registration_id),
                registration_code=created.registration_code,
                email=created.email,
            )
            for created in outcome.created
        ],
        emails_sent=outcome.emails_sent,
        emails_failed=outcome.emails_failed,
    )


@router.post(f"{_PREFIX}/parse", response_model=ParseImportResponse)
def parse_import_file(
    event_id: str,
    payload: ParseImportRequest,
    user_id: str = Depends(get_current_user_id),
    collaborators: ImportCollaborators = Depends(get_import_collaborators),
    import_service: AttendeeImportService = Depends(get_attendee_import_service),
) -> ParseImportResponse:
    """
    Parse an uploaded CSV and suggest a column mapping.
    """

    try:
        result = import_service.parse(
            collaborators=collaborators,
            event_id=event_id,
            user_id=user_id,
            file_content=payload.file_content,
            file_name=payload.file_name,
        )
    except _HANDLED_ERRORS as exc:
        _raise_http_error(exc)

    return ParseImportResponse(
        file_name=result.file.file_name,
        columns=list(result.file.columns),
        preview=[PreviewRowResponse(row=row.index, values=dict(row.values)) for row in result.preview],
        total_rows=result.file.total_rows,
        size_bytes=result.file.size_bytes,
        suggested_mapping={column: field.value for column, field in result.suggested_mapping.items()},
    )


@router.post(f"{_PREFIX}/validate", response_model=ValidationReportResponse)
def validate_import(
    event_id: str,
    payload: ValidateImportRequest,
    user_id: str = Depends(get_current_user_id),
    collaborators: ImportCollaborators = Depends(get_import_collaborators),
    import_service: AttendeeImportService = Depends(get_attendee_import_service),
) -> ValidationReportResponse:
    """
    Validate every row against a confirmed mapping without writing anything.
    """

    try:
        report = import_service.validate(
            collaborators=collaborators,
            event_id=event_id,
            user_id=user_id,
            file_content=payload.file_content,
            field_mapping=payload.field_mapping,
            duplicate_strategy=payload.duplicate_strategy,
        )
    except _HANDLED_ERRORS as exc:
        _raise_http_error(exc)

    return _report_response(report)


@router.post(f"{_PREFIX}/execute", response_model=ImportOutcomeResponse)
def execute_import(
    event_id: str,
    payload: ExecuteImportRequest,
    user_id: str = Depends(get_current_user_id),
    collaborators: ImportCollaborators = Depends(get_import_collaborators),
    import_service: AttendeeImportService = Depends(get_attendee_import_service),
) -> ImportOutcomeResponse:
    """
    Create registrations for every importable row. Rows that fail are
    reported in the response and do not undo rows already imported.
    """

    try:
        outcome = import_service.execute(
            collaborators=collaborators,
            event_id=event_id,
            user_id=user_id,
            file_content=payload.file_content,
            field_mapping=payload.field_mapping,
            duplicate_strategy=payload.duplicate_strategy,
            send_confirmation_emails=payload.send_confirmation_emails,
        )
    except _HANDLED_ERRORS as exc:
        _raise_http_error(exc)

    return _outcome_response(outcome)


@router.post(f"{_PREFIX}/failure-report")
def download_failure_report(
    event_id: str,
    payload: FailureReportRequest,
    user_id: str = Depends(get_current_user_id),
    collaborators: ImportCollaborators = Depends(get_import_collaborators),
) -> Response:
    """
    Render failed rows as a CSV that can be corrected and re-uploaded.
    """

    try:
        AttendeeImportService.authorize(collaborators.events, event_id=event_id, user_id=user_id)
    except _HANDLED_ERRORS as exc:
        _raise_http_error(exc)

    failures = [
        RowFailure(
            row=failure.row,
            field=failure.field,
            value=failure.value,
            message=failure.message,
            values=failure.values,
        )
        for failure in payload.failures
    ]
    return Response(
        content=build_failure_report(payload.columns, failures),
        media_type=_CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="import-failures-{event_id}.csv"'},
    )


@router.get(f"{_PREFIX}/mapping", response_model=FieldMappingResponse)
def get_field_mapping(
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    collaborators: ImportCollaborators = Depends(get_import_collaborators),
    import_service: AttendeeImportService = Depends(get_attendee_import_service),
) -> FieldMappingResponse:
    """
    Return the mapping this caller last confirmed for the event, if any.
    """

    try:
        mapping = import_service.get_mapping_preference(
            collaborators=collaborators,
            event_id=event_id,
            user_id=user_id,
        )
    except _HANDLED_ERRORS as exc:
        _raise_http_error(exc)

    return FieldMappingResponse(event_id=event_id, field_mapping=mapping)


@router.put(f"{_PREFIX}/mapping", response_model=FieldMappingResponse)
def put_field_mapping(
    event_id: str,
    payload: FieldMappingRequest,
    user_id: str = Depends(get_current_user_id),
    collaborators: ImportCollaborators = Depends(get_import_collaborators),
    import_service: AttendeeImportService = Depends(get_attendee_import_service),
) -> FieldMappingResponse:
    try:
        mapping = import_service.save_mapping_preference(
            collaborators=collaborators,
            event_id=event_id,
            user_id=user_id,
            field_mapping=payload.field_mapping,
        )
    except _HANDLED_ERRORS as exc:
        _raise_http_error(exc)

    return FieldMappingResponse(event_id=event_id, field_mapping=mapping)


@router.get("/attendee-import/template")
def download_import_template() -> Response:
    return Response(
        content=build_import_template(),
        media_type=_CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="attendee-import-template.csv"'},
    )
