"""
app/services/attendee_import_service.py

Service layer for the attendee CSV import workflow.

The workflow has three stateless phases, each of which re-submits the raw
file content:

    1. parse     - decode the file and suggest a column mapping
    2. validate  - apply the confirmed mapping and report row problems
    3. execute   - create registrations with partial-commit semantics

Every phase first checks that the caller organizes the target event.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Mapping

from app.config import (
    AttendeeImportSettings,
    get_attendee_import_settings,
    get_email_settings,
    get_external_http_settings,
)
from app.connectors.email_sender import EmailSender, build_email_sender
from app.domain.attendee_import import (
    AttendeeCandidate,
    CanonicalField,
    DuplicateStrategy,
    EventInfo,
    FieldMapping,
    ImportErrorType,
    ImportOutcome,
    ImportRowError,
    ImportWarning,
    ParsedFile,
    ParsedRow,
    TicketTypeIndex,
    ValidationReport,
)
from app.mappers.field_mapping_advisor import FieldMappingAdvisor
from app.parsers.csv_parser import CSVFileParser
from app.repositories.base import (
    EventDirectory,
    MappingPreferenceStore,
    RegistrationStore,
    TicketTypeDirectory,
)
from app.services.import_executor import ImportExecutor
from app.validators.duplicate_detector import DuplicateDetector
from app.validators.mapping_validator import MappingValidator
from app.validators.row_validator import AttendeeRowValidator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EventNotFoundError(LookupError):
    """
    Raised when the target event does not exist.
    """


class EventAccessDeniedError(PermissionError):
    """
    Raised when the caller does not organize the target event.
    """


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportCollaborators:
    """
    Request-scoped stores the import pipeline reads from and writes to.
    """

    events: EventDirectory
    ticket_types: TicketTypeDirectory
    registrations: RegistrationStore
    mapping_preferences: MappingPreferenceStore | None = None


@dataclass(frozen=True)
class ParseResult:
    file: ParsedFile
    preview: tuple[ParsedRow, ...]
    suggested_mapping: dict[str, CanonicalField]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AttendeeImportService:
    """
    Coordinates parsing, mapping, validation, and execution of attendee imports.
    """

    def __init__(
        self,
        *,
        settings: AttendeeImportSettings,
        email_sender: EmailSender | None = None,
        app_url: str = "",
        parser: CSVFileParser | None = None,
        advisor: FieldMappingAdvisor | None = None,
        row_validator: AttendeeRowValidator | None = None,
        executor_factory: Callable[[RegistrationStore], ImportExecutor] | None = None,
    ) -> None:
        self._settings = settings
        self._email_sender = email_sender
        self._app_url = app_url
        self._parser = parser or CSVFileParser(
            max_file_size_bytes=settings.max_file_size_bytes,
            max_rows=settings.max_rows,
            sanitize_cells=settings.sanitize_cells,
        )
        self._advisor = advisor or FieldMappingAdvisor()
        self._row_validator = row_validator or AttendeeRowValidator()
        self._executor_factory = executor_factory or self._default_executor

    # -- authorization -----------------------------------------------------

    @staticmethod
    def authorize(events: EventDirectory, *, event_id: str, user_id: str) -> EventInfo:
        event = events.get_event(event_id)
        if event is None:
            raise EventNotFoundError("Event not found")
        if str(event.organizer_id) != str(user_id):
            logger.warning("Attendee import denied event_id=%s user_id=%s", event_id, user_id)
            raise EventAccessDeniedError("Only the event organizer can import attendees")
        return event

    # -- phases ------------------------------------------------------------

    def parse(
        self,
        *,
        collaborators: ImportCollaborators,
        event_id: str,
        user_id: str,
        file_content: str | bytes,
        file_name: str | None = None,
    ) -> ParseResult:
        """
        Decode the upload and suggest a mapping for its columns.

        Raises:
            CSVParseError: when the file breaks a size, shape, or encoding rule.
        """

        self.authorize(collaborators.events, event_id=event_id, user_id=user_id)
        parsed = self._parser.parse(file_content, file_name=file_name)
        suggested = self._advisor.suggest(parsed.columns)
        logger.info(
            "Attendee file parsed event_id=%s file_name=%r rows=%s columns=%s suggested=%s",
            event_id,
            file_name,
            parsed.total_rows,
            len(parsed.columns),
            len(suggested),
        )
        return ParseResult(
            file=parsed,
            preview=parsed.rows[: self._settings.preview_rows],
            suggested_mapping=suggested,
        )

    def validate(
        self,
        *,
        collaborators: ImportCollaborators,
        event_id: str,
        user_id: str,
        file_content: str | bytes,
        field_mapping: Mapping[str, str | None],
        duplicate_strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
    ) -> ValidationReport:
        """
        Validate every row against the confirmed mapping.

        The duplicate strategy does not change classification; it is accepted
        so validate and execute share one request shape.

        Raises:
            CSVParseError: on file-level problems.
            SchemaMappingError: when the mapping fails the required-field gate.
        """

        self.authorize(collaborators.events, event_id=event_id, user_id=user_id)
        parsed = self._parser.parse(file_content)
        mapping = self._advisor.resolve(field_mapping, parsed.columns)
        ticket_types = TicketTypeIndex(collaborators.ticket_types.list_for_event(event_id))

        candidates: list[AttendeeCandidate] = []
        errors: list[ImportRowError] = []
        invalid_rows = 0
        for row in parsed.rows:
            candidate, row_errors = self._row_validator.validate_row(
                row=row,
                mapping=mapping,
                ticket_types=ticket_types,
                columns=parsed.columns,
            )
            if candidate is None:
                invalid_rows += 1
                errors.extend(row_errors)
            else:
                candidates.append(candidate)

        existing = collaborators.registrations.find_existing_emails(
            event_id,
            [candidate.email for candidate in candidates],
        )
        detector = DuplicateDetector(existing)
        importable: list[AttendeeCandidate] = []
        in_file_duplicates = 0
        database_duplicates = 0
        for candidate in candidates:
            finding = detector.observe(candidate)
            if finding is None:
                importable.append(candidate)
                continue
            errors.append(finding)
            if finding.type is ImportErrorType.DUPLICATE_IN_FILE:
                in_file_duplicates += 1
            else:
                database_duplicates += 1

        errors.sort(key=lambda error: error.row)
        report = ValidationReport(
            total_rows=parsed.total_rows,
            valid_rows=len(importable),
            invalid_rows=invalid_rows,
            in_file_duplicates=in_file_duplicates,
            database_duplicates=database_duplicates,
            errors=errors,
            warnings=self._ticket_availability_warnings(importable, ticket_types),
        )

        if self._settings.log_validation_errors:
            for error in report.errors:
                logger.warning(
                    "Attendee row rejected event_id=%s row=%s field=%s type=%s message=%s",
                    event_id,
                    error.row,
                    error.field,
                    error.type.value,
                    error.message,
                )
        logger.info(
            "Attendee file validated event_id=%s total=%s valid=%s invalid=%s "
            "in_file_duplicates=%s database_duplicates=%s strategy=%s",
            event_id,
            report.total_rows,
            report.valid_rows,
            report.invalid_rows,
            report.in_file_duplicates,
            report.database_duplicates,
            duplicate_strategy.value,
        )
        return report

    def execute(
        self,
        *,
        collaborators: ImportCollaborators,
        event_id: str,
        user_id: str,
        file_content: str | bytes,
        field_mapping: Mapping[str, str | None],
        duplicate_strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
        send_confirmation_emails: bool = False,
    ) -> ImportOutcome:
        """
        Re-validate each row and create registrations one at a time.

        Raises:
            CSVParseError: on file-level problems.
            SchemaMappingError: when the mapping fails the required-field gate.
        """

        event = self.authorize(collaborators.events, event_id=event_id, user_id=user_id)
        parsed = self._parser.parse(file_content)
        mapping = self._advisor.resolve(field_mapping, parsed.columns)
        ticket_types = TicketTypeIndex(collaborators.ticket_types.list_for_event(event_id))

        executor = self._executor_factory(collaborators.registrations)
        outcome = executor.execute(
            event=event,
            columns=parsed.columns,
            rows=parsed.rows,
            mapping=mapping,
            ticket_types=ticket_types,
            strategy=duplicate_strategy,
            send_confirmation_emails=send_confirmation_emails,
        )

        if collaborators.mapping_preferences is not None and outcome.success_count > 0:
            self._remember_mapping(collaborators.mapping_preferences, event_id, user_id, mapping)
        return outcome

    # -- mapping memory ----------------------------------------------------

    def get_mapping_preference(
        self,
        *,
        collaborators: ImportCollaborators,
        event_id: str,
        user_id: str,
    ) -> dict[str, str | None] | None:
        self.authorize(collaborators.events, event_id=event_id, user_id=user_id)
        if collaborators.mapping_preferences is None:
            return None
        return collaborators.mapping_preferences.get(event_id, user_id)

    def save_mapping_preference(
        self,
        *,
        collaborators: ImportCollaborators,
        event_id: str,
        user_id: str,
        field_mapping: Mapping[str, str | None],
    ) -> dict[str, str | None]:
        """
        Store a mapping for later uploads. Targets are checked here; the
        required-field gate runs against the actual file on validate.

        Raises:
            SchemaMappingError: when a target is unknown or mapped twice.
        """

        self.authorize(collaborators.events, event_id=event_id, user_id=user_id)
        columns = [column.strip() for column in field_mapping]
        mapping = FieldMappingAdvisor(
            validator=MappingValidator(required_fields=()),
        ).resolve(field_mapping, columns)
        wire = mapping.to_wire()
        if collaborators.mapping_preferences is not None:
            collaborators.mapping_preferences.set(event_id, user_id, wire)
        return wire

    # -- helpers -----------------------------------------------------------

    def _default_executor(self, registrations: RegistrationStore) -> ImportExecutor:
        return ImportExecutor(
            registrations=registrations,
            email_sender=self._email_sender,
            app_url=self._app_url,
            row_validator=self._row_validator,
        )

    @staticmethod
    def _ticket_availability_warnings(
        importable: list[AttendeeCandidate],
        ticket_types: TicketTypeIndex,
    ) -> list[ImportWarning]:
        requested = Counter(candidate.ticket_type.id for candidate in importable)
        warnings: list[ImportWarning] = []
        for ticket_type in ticket_types:
            count = requested.get(ticket_type.id, 0)
            available = ticket_type.available
            if available is None or count <= available:
                continue
            warnings.append(
                ImportWarning(
                    field=CanonicalField.TICKET_TYPE.value,
                    value=ticket_type.name,
                    message=(
                        f"Importing {count} registrations for '{ticket_type.name}' but only "
                        f"{available} slots available ({ticket_type.sold}/{ticket_type.capacity} already sold)"
                    ),
                )
            )
        return warnings

    @staticmethod
    def _remember_mapping(
        store: MappingPreferenceStore,
        event_id: str,
        user_id: str,
        mapping: FieldMapping,
    ) -> None:
        try:
            store.set(event_id, user_id, mapping.to_wire())
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Mapping preference not saved event_id=%s user_id=%s error=%s",
                event_id,
                user_id,
                exc,
            )


@lru_cache(maxsize=1)
def get_attendee_import_service() -> AttendeeImportService:
    """
    Build and cache the import service with env-driven settings.
    """
    email_settings = get_email_settings()
    return AttendeeImportService(
        settings=get_attendee_import_settings(),
        email_sender=build_email_sender(email_settings, get_external_http_settings()),
        app_url=email_settings.app_url,
    )
