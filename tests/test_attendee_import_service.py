"""
tests/test_attendee_import_service.py

Pytest tests for AttendeeImportService using in-memory collaborators.

Coverage
--------
- Authorization (missing event, non-organizer)
- parse: preview length, suggested mapping
- validate: count identity, error ordering, required-field gate,
  capacity warnings, statelessness
- execute: partial commit end to end, mapping memory
"""

from __future__ import annotations

import pytest

from app.config import AttendeeImportSettings
from app.domain.attendee_import import CanonicalField, DuplicateStrategy, ImportErrorType, ImportStatus
from app.parsers.csv_parser import TooManyRowsError
from app.services.attendee_import_service import (
    AttendeeImportService,
    EventAccessDeniedError,
    EventNotFoundError,
)
from app.validators.mapping_validator import SchemaMappingError

EVENT_ID = "0b6f7d4e-2f4a-4a4e-9d8e-5f0c1a2b3c4d"
ORGANIZER_ID = "organizer-1"


def _csv(*rows: str, header: str = "Name,Email,Ticket") -> str:
    return "\n".join([header, *rows]) + "\n"


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


def test_unknown_event_is_not_found(import_service, collaborators) -> None:
    with pytest.raises(EventNotFoundError):
        import_service.parse(
            collaborators=collaborators,
            event_id="missing",
            user_id=ORGANIZER_ID,
            file_content=_csv("Ada,ada@example.com,VIP"),
        )


def test_non_organizer_is_denied(import_service, collaborators, registrations, standard_mapping) -> None:
    with pytest.raises(EventAccessDeniedError):
        import_service.execute(
            collaborators=collaborators,
            event_id=EVENT_ID,
            user_id="someone-else",
            file_content=_csv("Ada,ada@example.com,VIP"),
            field_mapping=standard_mapping,
        )

    assert registrations.created == []


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------


def test_parse_returns_preview_and_suggestion(import_service, collaborators) -> None:
    content = _csv(
        *(f"User {i},user{i}@example.com,VIP,ACME" for i in range(1, 26)),
        header="Full Name,E-mail,Ticket Type,Company",
    )

    result = import_service.parse(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=content,
        file_name="attendees.csv",
    )

    assert result.file.total_rows == 25
    assert len(result.preview) == 10
    assert result.preview[0].index == 1
    assert result.suggested_mapping == {
        "Full Name": CanonicalField.NAME,
        "E-mail": CanonicalField.EMAIL,
        "Ticket Type": CanonicalField.TICKET_TYPE,
    }


def test_parse_respects_configured_row_limit(collaborators) -> None:
    service = AttendeeImportService(settings=AttendeeImportSettings(max_rows=2))

    with pytest.raises(TooManyRowsError):
        service.parse(
            collaborators=collaborators,
            event_id=EVENT_ID,
            user_id=ORGANIZER_ID,
            file_content=_csv("A a,a@example.com,VIP", "B b,b@example.com,VIP", "C c,c@example.com,VIP"),
        )


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


def test_validate_counts_add_up(import_service, collaborators, registrations, standard_mapping) -> None:
    registrations.existing = {"taken@example.com"}
    content = _csv(
        "Ada Lovelace,ada@example.com,General Admission",
        "Bad Email,not-an-email,General Admission",
        "Ada Again,ADA@example.com,General Admission",
        "Taken,taken@example.com,General Admission",
        "No Ticket,nt@example.com,Backstage",
        "Grace Hopper,grace@example.com,general admission",
    )

    report = import_service.validate(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=content,
        field_mapping=standard_mapping,
    )

    assert report.total_rows == 6
    assert report.valid_rows == 2
    assert report.invalid_rows == 2
    assert report.in_file_duplicates == 1
    assert report.database_duplicates == 1
    assert (
        report.valid_rows + report.invalid_rows + report.in_file_duplicates + report.database_duplicates
        == report.total_rows
    )
    assert [(error.row, error.type) for error in report.errors] == [
        (2, ImportErrorType.VALIDATION),
        (3, ImportErrorType.DUPLICATE_IN_FILE),
        (4, ImportErrorType.DUPLICATE_IN_DB),
        (5, ImportErrorType.VALIDATION),
    ]
    assert report.errors[1].message == "Duplicate email found in file (first occurrence at row 1)"


def test_validate_classification_ignores_strategy(import_service, collaborators, standard_mapping) -> None:
    content = _csv("Ada,ada@example.com,VIP", "Ada,ada@example.com,VIP")
    reports = [
        import_service.validate(
            collaborators=collaborators,
            event_id=EVENT_ID,
            user_id=ORGANIZER_ID,
            file_content=content,
            field_mapping=standard_mapping,
            duplicate_strategy=strategy,
        )
        for strategy in (DuplicateStrategy.SKIP, DuplicateStrategy.CREATE)
    ]

    assert reports[0] == reports[1]


def test_required_field_gate_runs_before_rows(import_service, collaborators, registrations) -> None:
    with pytest.raises(SchemaMappingError) as exc_info:
        import_service.validate(
            collaborators=collaborators,
            event_id=EVENT_ID,
            user_id=ORGANIZER_ID,
            file_content=_csv("x,y,z"),
            field_mapping={"Name": "name", "Email": "email", "Ticket": None},
        )

    assert exc_info.value.message == "Required fields not mapped: ticketType"
    assert registrations.lookups == 0


def test_capacity_warning(import_service, collaborators, standard_mapping) -> None:
    report = import_service.validate(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=_csv("Ada,ada@example.com,VIP", "Grace,grace@example.com,VIP"),
        field_mapping=standard_mapping,
    )

    [warning] = report.warnings
    assert warning.value == "VIP"
    assert warning.message == (
        "Importing 2 registrations for 'VIP' but only 1 slots available (1/2 already sold)"
    )
    assert report.valid_rows == 2


def test_validate_writes_nothing(
    import_service, collaborators, registrations, mapping_preferences, standard_mapping
) -> None:
    import_service.validate(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=_csv("Ada,ada@example.com,VIP"),
        field_mapping=standard_mapping,
    )

    assert registrations.created == []
    assert mapping_preferences.saved == {}


# ---------------------------------------------------------------------------
# execute
# ---------------------------------------------------------------------------


def test_execute_end_to_end(
    import_service, collaborators, registrations, mapping_preferences, standard_mapping
) -> None:
    content = _csv(
        "Ada Lovelace,ada@example.com,VIP",
        "Bad Row,bad,VIP",
        "Grace Hopper,grace@example.com,General Admission",
    )

    outcome = import_service.execute(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=content,
        field_mapping=standard_mapping,
        send_confirmation_emails=True,
    )

    assert outcome.status is ImportStatus.PARTIAL
    assert outcome.success_count == 2
    assert outcome.failures[0].row == 2
    assert outcome.emails_sent == 2
    assert len(registrations.created) == 2
    assert mapping_preferences.saved[(EVENT_ID, ORGANIZER_ID)] == standard_mapping


def test_execute_revalidates_instead_of_trusting_earlier_report(
    import_service, collaborators, registrations, standard_mapping
) -> None:
    content = _csv("Ada,ada@example.com,VIP")
    import_service.validate(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=content,
        field_mapping=standard_mapping,
    )
    registrations.existing.add("ada@example.com")

    outcome = import_service.execute(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        file_content=content,
        field_mapping=standard_mapping,
        duplicate_strategy=DuplicateStrategy.SKIP,
    )

    assert outcome.skipped_count == 1
    assert registrations.created == []


# ---------------------------------------------------------------------------
# mapping memory
# ---------------------------------------------------------------------------


def test_mapping_preference_round_trip(import_service, collaborators) -> None:
    assert (
        import_service.get_mapping_preference(
            collaborators=collaborators, event_id=EVENT_ID, user_id=ORGANIZER_ID
        )
        is None
    )

    saved = import_service.save_mapping_preference(
        collaborators=collaborators,
        event_id=EVENT_ID,
        user_id=ORGANIZER_ID,
        field_mapping={"Email": "email", "Org": "custom_company", "Notes": "skip"},
    )

    assert saved == {"Email": "email", "Org": "custom:company", "Notes": None}
    assert (
        import_service.get_mapping_preference(
            collaborators=collaborators, event_id=EVENT_ID, user_id=ORGANIZER_ID
        )
        == saved
    )


def test_mapping_preference_rejects_unknown_targets(import_service, collaborators) -> None:
    with pytest.raises(SchemaMappingError):
        import_service.save_mapping_preference(
            collaborators=collaborators,
            event_id=EVENT_ID,
            user_id=ORGANIZER_ID,
            field_mapping={"Email": "e-mail-address"},
        )
