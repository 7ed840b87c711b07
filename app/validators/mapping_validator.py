"""
app/validators/mapping_validator.py

Validation for confirmed column-to-field mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.domain.attendee_import import REQUIRED_FIELDS, CanonicalField, FieldTarget


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    canonical_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class SchemaMappingError(ValueError):
    """
    Raised when a field mapping cannot be used for validation or execution.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": "invalid_field_mapping",
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "canonical_field": error.canonical_field,
                    "source_column": error.source_column,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


class MappingValidator:
    """
    Validates typed column -> target mappings against the file headers.
    """

    def __init__(self, *, required_fields: Sequence[CanonicalField] = REQUIRED_FIELDS) -> None:
        self._required_fields = tuple(required_fields)

    def validate(
        self,
        *,
        targets: Mapping[str, FieldTarget | None],
        source_headers: Sequence[str],
        pre_errors: Sequence[MappingErrorDetail] | None = None,
    ) -> None:
        """
        Validate mapping and raise structured errors if invalid.
        """

        errors: list[MappingErrorDetail] = list(pre_errors or [])
        headers_set = set(source_headers)
        claimed: dict[CanonicalField, str] = {}

        for source_column, target in targets.items():
            if source_column not in headers_set:
                errors.append(
                    MappingErrorDetail(
                        code="unknown_source_column",
                        message="Mapped source column does not exist in CSV headers.",
                        canonical_field=target.value if isinstance(target, CanonicalField) else None,
                        source_column=source_column,
                    )
                )
                continue
            if not isinstance(target, CanonicalField):
                continue

            first_column = claimed.get(target)
            if first_column is not None:
                errors.append(
                    MappingErrorDetail(
                        code="duplicate_canonical_field",
                        message="Field is mapped from more than one column.",
                        canonical_field=target.value,
                        source_column=source_column,
                        context={"first_column": first_column},
                    )
                )
                continue
            claimed[target] = source_column

        for required in self._required_fields:
            if required not in claimed:
                errors.append(
                    MappingErrorDetail(
                        code="required_field_unmapped",
                        message="Required field is not mapped.",
                        canonical_field=required.value,
                        context={"source_headers": list(source_headers)},
                    )
                )

        if errors:
            missing_required = [
                error.canonical_field
                for error in errors
                if error.code == "required_field_unmapped" and error.canonical_field
            ]
            if missing_required:
                message = f"Required fields not mapped: {', '.join(missing_required)}"
            else:
                message = "Field mapping is invalid."
            raise SchemaMappingError(message=message, errors=errors)
