"""
app/services/import_executor.py

Partial-commit import of validated attendee rows.

Rows are processed one at a time in file order. Every row yields exactly one
result (created, skipped or failed) and each created registration is
committed on its own, so a failure at row N never undoes rows before it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from app.connectors.email_sender import EmailSender
from app.domain.attendee_import import (
    AttendeeCandidate,
    DuplicateStrategy,
    EventInfo,
    FieldMapping,
    ImportOutcome,
    ImportStatus,
    ParsedRow,
    RegistrationInput,
    RowCreated,
    RowFailure,
    RowResult,
    RowSkipped,
    TicketTypeIndex,
)
from app.repositories.base import RegistrationStore, RegistrationStoreUnavailableError
from app.services.confirmation_email import render_registration_confirmation
from app.services.registration_codes import generate_registration_code
from app.validators.duplicate_detector import DuplicateDetector
from app.validators.row_validator import AttendeeRowValidator
from db.models.registration import RegistrationEmailStatus, RegistrationPaymentStatus

logger = logging.getLogger(__name__)

REGISTRATION_CODE_KEY = "registrationCode"


def resolve_import_status(success_count: int, failure_count: int) -> ImportStatus:
    if failure_count == 0:
        return ImportStatus.COMPLETED
    if success_count > 0:
        return ImportStatus.PARTIAL
    return ImportStatus.FAILED


@dataclass
class _OutcomeAccumulator:
    created: list[RowCreated] = field(default_factory=list)
    skipped: list[RowSkipped] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)
    emails_sent: int = 0
    emails_failed: int = 0

    def add(self, result: RowResult) -> None:
        if isinstance(result, RowCreated):
            self.created.append(result)
        elif isinstance(result, RowSkipped):
            self.skipped.append(result)
        else:
            self.failures.append(result)

    def build(self) -> ImportOutcome:
        return ImportOutcome(
            status=resolve_import_status(len(self.created), len(self.failures)),
            success_count=len(self.created),
            failure_count=len(self.failures),
            skipped_count=len(self.skipped),
            failures=list(self.failures),
            created=list(self.created),
            emails_sent=self.emails_sent,
            emails_failed=self.emails_failed,
        )


class ImportExecutor:
    """
    Creates registrations for every importable row of a confirmed upload.
    """

    def __init__(
        self,
        *,
        registrations: RegistrationStore,
        email_sender: EmailSender | None = None,
        app_url: str = "",
        row_validator: AttendeeRowValidator | None = None,
        code_generator: Callable[[], str] = generate_registration_code,
    ) -> None:
        self._registrations = registrations
        self._email_sender = email_sender
        self._app_url = app_url
        self._row_validator = row_validator or AttendeeRowValidator()
        self._code_generator = code_generator

    def execute(
        self,
        *,
        event: EventInfo,
        columns: tuple[str, ...],
        rows: Sequence[ParsedRow],
        mapping: FieldMapping,
        ticket_types: TicketTypeIndex,
        strategy: DuplicateStrategy,
        send_confirmation_emails: bool = False,
    ) -> ImportOutcome:
        candidates: dict[int, AttendeeCandidate] = {}
        validation_failures: dict[int, RowFailure] = {}
        for row in rows:
            candidate, errors = self._row_validator.validate_row(
                row=row,
                mapping=mapping,
                ticket_types=ticket_types,
                columns=columns,
            )
            if candidate is not None:
                candidates[row.index] = candidate
            else:
                first = errors[0]
                validation_failures[row.index] = RowFailure(
                    row=row.index,
                    field=first.field,
                    value=first.value,
                    message="; ".join(error.message for error in errors),
                    values=dict(row.values),
                )

        accumulator = _OutcomeAccumulator()
        try:
            existing = self._registrations.find_existing_emails(
                event.id,
                [candidate.email for candidate in candidates.values()],
            )
        except RegistrationStoreUnavailableError as exc:
            logger.error("Registration store unavailable event_id=%s error=%s", event.id, exc)
            for row in rows:
                accumulator.add(
                    RowFailure(
                        row=row.index,
                        field="",
                        value="",
                        message=str(exc) or "Registration store is unavailable.",
                        values=dict(row.values),
                    )
                )
            return accumulator.build()

        detector = DuplicateDetector(existing)
        for row in rows:
            failure = validation_failures.get(row.index)
            if failure is not None:
                accumulator.add(failure)
                continue

            candidate = candidates[row.index]
            result = self._import_candidate(
                event=event,
                row=row,
                candidate=candidate,
                detector=detector,
                strategy=strategy,
            )
            accumulator.add(result)

            if send_confirmation_emails and isinstance(result, RowCreated):
                if self._send_confirmation(event=event, candidate=candidate, created=result):
                    accumulator.emails_sent += 1
                else:
                    accumulator.emails_failed += 1

        outcome = accumulator.build()
        logger.info(
            "Attendee import finished event_id=%s status=%s created=%s skipped=%s failed=%s "
            "emails_sent=%s emails_failed=%s",
            event.id,
            outcome.status.value,
            outcome.success_count,
            outcome.skipped_count,
            outcome.failure_count,
            outcome.emails_sent,
            outcome.emails_failed,
        )
        return outcome

    def _import_candidate(
        self,
        *,
        event: EventInfo,
        row: ParsedRow,
        candidate: AttendeeCandidate,
        detector: DuplicateDetector,
        strategy: DuplicateStrategy,
    ) -> RowResult:
        duplicate = detector.observe(candidate)
        if duplicate is not None and strategy is DuplicateStrategy.SKIP:
            return RowSkipped(row=row.index, reason=duplicate.type, email=candidate.email)

        registration_code = self._code_generator()
        custom_data = dict(candidate.custom_data)
        custom_data[REGISTRATION_CODE_KEY] = registration_code

        registration = RegistrationInput(
            event_id=event.id,
            email=candidate.email,
            name=candidate.name,
            ticket_type_id=candidate.ticket_type.id,
            payment_status=candidate.payment_status or RegistrationPaymentStatus.FREE,
            email_status=candidate.email_status or RegistrationEmailStatus.ACTIVE,
            custom_data=custom_data,
            registered_at=candidate.registered_at,
        )
        try:
            registration_id = self._registrations.create(registration)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Attendee row import failed event_id=%s row=%s email=%r error=%s",
                event.id,
                row.index,
                candidate.email,
                exc,
            )
            return RowFailure(
                row=row.index,
                field="",
                value=candidate.email,
                message=str(exc) or "Failed to create registration",
                values=dict(row.values),
            )

        return RowCreated(
            row=row.index,
            registration_id=registration_id,
            registration_code=registration_code,
            email=candidate.email,
        )

    def _send_confirmation(
        self,
        *,
        event: EventInfo,
        candidate: AttendeeCandidate,
        created: RowCreated,
    ) -> bool:
        if self._email_sender is None:
            return False

        message = render_registration_confirmation(
            event=event,
            attendee_name=candidate.name,
            attendee_email=candidate.email,
            ticket_type=candidate.ticket_type.name,
            registration_code=created.registration_code,
            app_url=self._app_url,
        )
        try:
            self._email_sender.send(message)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Confirmation email failed event_id=%s row=%s email=%r error=%s",
                event.id,
                created.row,
                created.email,
                exc,
            )
            return False
        return True
