from __future__ import annotations

import unittest

from app.domain.attendee_import import CanonicalField, CustomField
from app.validators.mapping_validator import MappingErrorDetail, MappingValidator, SchemaMappingError


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator()
        self.headers = ("Name", "Email", "Ticket", "Company")

    def test_accepts_complete_mapping(self) -> None:
        self.validator.validate(
            targets={
                "Name": CanonicalField.NAME,
                "Email": CanonicalField.EMAIL,
                "Ticket": CanonicalField.TICKET_TYPE,
                "Company": CustomField(key="company"),
            },
            source_headers=self.headers,
        )

    def test_raises_on_missing_required_fields(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                targets={"Name": CanonicalField.NAME, "Company": None},
                source_headers=self.headers,
            )

        missing = {
            error.canonical_field for error in ctx.exception.errors if error.code == "required_field_unmapped"
        }
        self.assertEqual(missing, {"email", "ticketType"})
        self.assertEqual(ctx.exception.message, "Required fields not mapped: email, ticketType")

    def test_raises_on_field_mapped_twice(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                targets={
                    "Name": CanonicalField.NAME,
                    "Email": CanonicalField.EMAIL,
                    "Ticket": CanonicalField.TICKET_TYPE,
                    "Company": CanonicalField.EMAIL,
                },
                source_headers=self.headers,
            )

        [error] = ctx.exception.errors
        self.assertEqual(error.code, "duplicate_canonical_field")
        self.assertEqual(error.context, {"first_column": "Email"})
        self.assertEqual(ctx.exception.message, "Field mapping is invalid.")

    def test_raises_on_invalid_source_column(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                targets={
                    "Name": CanonicalField.NAME,
                    "Email": CanonicalField.EMAIL,
                    "Ticket": CanonicalField.TICKET_TYPE,
                    "Missing": CustomField(key="missing"),
                },
                source_headers=self.headers,
                pre_errors=[
                    MappingErrorDetail(
                        code="invalid_target_field",
                        message="Mapping target is not a known attendee field.",
                        canonical_field="age",
                        source_column="Company",
                    )
                ],
            )

        codes = [error.code for error in ctx.exception.errors]
        self.assertIn("unknown_source_column", codes)
        self.assertIn("invalid_target_field", codes)
        self.assertEqual(ctx.exception.to_dict()["code"], "invalid_field_mapping")

    def test_required_fields_can_be_relaxed(self) -> None:
        MappingValidator(required_fields=()).validate(
            targets={"Company": CustomField(key="company")},
            source_headers=self.headers,
        )


if __name__ == "__main__":
    unittest.main()
