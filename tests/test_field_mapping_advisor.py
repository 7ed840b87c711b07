"""
tests/test_field_mapping_advisor.py

Pytest unit tests for FieldMappingAdvisor suggestion and resolution.
"""

from __future__ import annotations

import pytest

from app.domain.attendee_import import CanonicalField, CustomField
from app.mappers.field_mapping_advisor import FieldMappingAdvisor
from app.validators.mapping_validator import SchemaMappingError


@pytest.fixture()
def advisor() -> FieldMappingAdvisor:
    return FieldMappingAdvisor()


# ---------------------------------------------------------------------------
# suggest
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("column", "expected"),
    [
        ("Email", CanonicalField.EMAIL),
        ("E-Mail", CanonicalField.EMAIL),
        ("Work Email", CanonicalField.EMAIL),
        ("email address", CanonicalField.EMAIL),
        (" Full Name ", CanonicalField.NAME),
        ("Attendee", CanonicalField.NAME),
        ("Ticket Type", CanonicalField.TICKET_TYPE),
        ("type", CanonicalField.TICKET_TYPE),
        ("Payment", CanonicalField.PAYMENT_STATUS),
        ("status", CanonicalField.PAYMENT_STATUS),
        ("Registration Date", CanonicalField.REGISTERED_AT),
        ("Company", None),
    ],
)
def test_suggest_field(advisor: FieldMappingAdvisor, column: str, expected: CanonicalField | None) -> None:
    assert advisor.suggest_field(column) == expected


def test_email_group_claims_email_status_first(advisor: FieldMappingAdvisor) -> None:
    assert advisor.suggest_field("Email Status") is CanonicalField.EMAIL
    assert advisor.suggest_field("email_status") is CanonicalField.EMAIL


@pytest.mark.parametrize(
    ("columns", "expected"),
    [
        (
            ["Email", "Name", "Backup Email", "Full Name", "Ticket", "Company"],
            {"Email": CanonicalField.EMAIL, "Name": CanonicalField.NAME, "Ticket": CanonicalField.TICKET_TYPE},
        ),
        (
            ["Full Name", "Email Address", "Name"],
            {"Full Name": CanonicalField.NAME, "Email Address": CanonicalField.EMAIL},
        ),
    ],
)
def test_suggest_never_assigns_a_field_twice(
    advisor: FieldMappingAdvisor, columns: list[str], expected: dict[str, CanonicalField]
) -> None:
    assert advisor.suggest(columns) == expected


def test_suggest_handles_empty_and_unknown_columns(advisor: FieldMappingAdvisor) -> None:
    assert advisor.suggest([]) == {}
    assert advisor.suggest(["foo", "bar"]) == {}


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


def test_resolve_parses_wire_targets(advisor: FieldMappingAdvisor) -> None:
    mapping = advisor.resolve(
        {
            "Name": "name",
            "Email": "email",
            "Ticket": "ticketType",
            "Company": "custom:company",
            "Diet": "custom_dietary",
            "Internal": "skip",
            "Notes": None,
        },
        ["Name", "Email", "Ticket", "Company", "Diet", "Internal", "Notes", "Shirt"],
    )

    assert mapping.column_for(CanonicalField.EMAIL) == "Email"
    assert mapping.target_for("Company") == CustomField(key="company")
    assert mapping.target_for("Diet") == CustomField(key="dietary")
    assert mapping.target_for("Internal") is None
    assert mapping.target_for("Notes") is None
    assert mapping.target_for("Shirt") == CustomField(key="Shirt")
    assert mapping.custom_columns(
        ("Name", "Email", "Ticket", "Company", "Diet", "Internal", "Notes", "Shirt")
    ) == [("Company", "company"), ("Diet", "dietary"), ("Shirt", "Shirt")]


def test_resolve_rejects_missing_ticket_type(advisor: FieldMappingAdvisor) -> None:
    with pytest.raises(SchemaMappingError) as exc_info:
        advisor.resolve({"Name": "name", "Email": "email"}, ["Name", "Email", "Ticket"])

    assert exc_info.value.message == "Required fields not mapped: ticketType"
    assert [error.code for error in exc_info.value.errors] == ["required_field_unmapped"]


def test_resolve_rejects_unknown_target(advisor: FieldMappingAdvisor) -> None:
    with pytest.raises(SchemaMappingError) as exc_info:
        advisor.resolve(
            {"Name": "name", "Email": "email", "Ticket": "ticketType", "Age": "age"},
            ["Name", "Email", "Ticket", "Age"],
        )

    assert "invalid_target_field" in {error.code for error in exc_info.value.errors}


def test_to_wire_round_trips_through_resolve(advisor: FieldMappingAdvisor) -> None:
    columns = ["Name", "Email", "Ticket", "Company", "Internal"]
    mapping = advisor.resolve(
        {"Name": "name", "Email": "email", "Ticket": "ticketType", "Company": "custom:org", "Internal": ""},
        columns,
    )

    assert mapping.to_wire() == {
        "Name": "name",
        "Email": "email",
        "Ticket": "ticketType",
        "Company": "custom:org",
        "Internal": None,
    }
    assert dict(advisor.resolve(mapping.to_wire(), columns).targets) == dict(mapping.targets)
