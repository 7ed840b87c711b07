"""
app/mappers/field_mapping_advisor.py

Column-name based mapping suggestions and confirmed-mapping resolution.
"""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from app.domain.attendee_import import CanonicalField, CustomField, FieldMapping, FieldTarget
from app.validators.mapping_validator import MappingErrorDetail, MappingValidator

CUSTOM_PREFIXES: tuple[str, ...] = ("custom:", "custom_")
EXCLUDED_TARGETS = {"", "skip", "ignore", "none"}


def _email_pattern(normalized: str) -> bool:
    return normalized.startswith("email") or normalized.endswith("email") or normalized == "e-mail"


def _one_of(*names: str) -> Callable[[str], bool]:
    accepted = frozenset(names)
    return lambda normalized: normalized in accepted


# Ordered; the first matching group claims the column.
SUGGESTION_PATTERNS: tuple[tuple[CanonicalField, Callable[[str], bool]], ...] = (
    (CanonicalField.EMAIL, _email_pattern),
    (CanonicalField.NAME, _one_of("name", "full name", "fullname", "attendee", "attendee name")),
    (CanonicalField.TICKET_TYPE, _one_of("ticket", "ticket type", "tickettype", "ticket_type", "type")),
    (
        CanonicalField.PAYMENT_STATUS,
        _one_of("payment", "payment status", "paymentstatus", "payment_status", "status"),
    ),
    (CanonicalField.EMAIL_STATUS, _one_of("email status", "emailstatus", "email_status")),
    (
        CanonicalField.REGISTERED_AT,
        _one_of(
            "date",
            "registered",
            "registration date",
            "registrationdate",
            "registered_at",
            "registeredat",
        ),
    ),
)


def normalize_header(header: str) -> str:
    return header.strip().lower()


class FieldMappingAdvisor:
    """
    Suggests a column mapping and turns confirmed wire mappings into typed ones.
    """

    def __init__(self, *, validator: MappingValidator | None = None) -> None:
        self._validator = validator or MappingValidator()

    def suggest_field(self, column: str) -> CanonicalField | None:
        normalized = normalize_header(column)
        for canonical, matches in SUGGESTION_PATTERNS:
            if matches(normalized):
                return canonical
        return None

    def suggest(self, columns: Sequence[str]) -> dict[str, CanonicalField]:
        """
        Suggest a mapping; never raises and never proposes a field twice.
        """

        suggested: dict[str, CanonicalField] = {}
        for column in columns:
            canonical = self.suggest_field(column)
            if canonical is None or canonical in suggested.values():
                continue
            suggested[column] = canonical
        return suggested

    def resolve(
        self,
        raw_mapping: Mapping[str, str | None],
        columns: Sequence[str],
    ) -> FieldMapping:
        """
        Parse a wire mapping (column -> "email" | "custom:<key>" | "skip" ...)
        and enforce the mapping gate.

        Raises:
            SchemaMappingError: when a required field is unmapped, mapped twice,
                or the mapping names unknown targets or columns.
        """

        targets: dict[str, FieldTarget | None] = {}
        pre_errors: list[MappingErrorDetail] = []

        for raw_column, raw_target in raw_mapping.items():
            column = raw_column.strip()
            try:
                targets[column] = self.parse_target(raw_target, column=column)
            except ValueError:
                pre_errors.append(
                    MappingErrorDetail(
                        code="invalid_target_field",
                        message="Mapping target is not a known attendee field.",
                        canonical_field=str(raw_target),
                        source_column=column,
                    )
                )

        self._validator.validate(
            targets=targets,
            source_headers=columns,
            pre_errors=pre_errors,
        )
        return FieldMapping(targets=targets)

    @staticmethod
    def parse_target(raw_target: str | None, *, column: str) -> FieldTarget | None:
        if raw_target is None:
            return None
        target = raw_target.strip()
        if target.lower() in EXCLUDED_TARGETS:
            return None
        for prefix in CUSTOM_PREFIXES:
            if target.startswith(prefix):
                key = target[len(prefix):].strip()
                return CustomField(key=key or column)
        return CanonicalField(target)
