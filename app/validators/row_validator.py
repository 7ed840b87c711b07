"""
app/validators/row_validator.py

Per-field validation of mapped attendee rows.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

from app.domain.attendee_import import (
    AttendeeCandidate,
    CanonicalField,
    FieldMapping,
    ImportRowError,
    ParsedRow,
    TicketTypeIndex,
)
from db.models.registration import RegistrationEmailStatus, RegistrationPaymentStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255

ALLOWED_PAYMENT_STATUSES: tuple[str, ...] = (
    RegistrationPaymentStatus.FREE,
    RegistrationPaymentStatus.PENDING,
    RegistrationPaymentStatus.PAID,
    RegistrationPaymentStatus.FAILED,
    RegistrationPaymentStatus.REFUNDED,
)

ALLOWED_EMAIL_STATUSES: tuple[str, ...] = (
    RegistrationEmailStatus.ACTIVE,
    RegistrationEmailStatus.BOUNCED,
    RegistrationEmailStatus.UNSUBSCRIBED,
)


class AttendeeRowValidator:
    """
    Validates one parsed row against a confirmed mapping and the event's ticket types.
    """

    def validate_row(
        self,
        *,
        row: ParsedRow,
        mapping: FieldMapping,
        ticket_types: TicketTypeIndex,
        columns: tuple[str, ...],
    ) -> tuple[AttendeeCandidate | None, list[ImportRowError]]:
        """
        Return the normalized candidate, or ``None`` with every field error found.
        """

        errors: list[ImportRowError] = []

        name = self._validate_name(self._value(row, mapping, CanonicalField.NAME), row.index, errors)
        email = self._validate_email(self._value(row, mapping, CanonicalField.EMAIL), row.index, errors)
        ticket_type_raw = self._value(row, mapping, CanonicalField.TICKET_TYPE)
        ticket_type = None
        if not ticket_type_raw:
            errors.append(self._error(row.index, CanonicalField.TICKET_TYPE, "", "Ticket type is required"))
        else:
            ticket_type = ticket_types.resolve(ticket_type_raw)
            if ticket_type is None:
                errors.append(
                    self._error(
                        row.index,
                        CanonicalField.TICKET_TYPE,
                        ticket_type_raw,
                        f"Ticket type '{ticket_type_raw}' not found for this event",
                    )
                )

        payment_status = self._validate_choice(
            value=self._value(row, mapping, CanonicalField.PAYMENT_STATUS),
            field=CanonicalField.PAYMENT_STATUS,
            allowed=ALLOWED_PAYMENT_STATUSES,
            label="payment status",
            row_index=row.index,
            errors=errors,
        )
        email_status = self._validate_choice(
            value=self._value(row, mapping, CanonicalField.EMAIL_STATUS),
            field=CanonicalField.EMAIL_STATUS,
            allowed=ALLOWED_EMAIL_STATUSES,
            label="email status",
            row_index=row.index,
            errors=errors,
        )
        registered_at = self._validate_registered_at(
            self._value(row, mapping, CanonicalField.REGISTERED_AT),
            row.index,
            errors,
        )

        if errors or ticket_type is None:
            return None, errors

        custom_data = {
            key: row.get(column)
            for column, key in mapping.custom_columns(columns)
            if row.get(column)
        }
        return (
            AttendeeCandidate(
                row=row.index,
                email=email,
                name=name,
                ticket_type=ticket_type,
                payment_status=payment_status,
                email_status=email_status,
                registered_at=registered_at,
                custom_data=custom_data,
            ),
            [],
        )

    @staticmethod
    def _value(row: ParsedRow, mapping: FieldMapping, field: CanonicalField) -> str:
        column = mapping.column_for(field)
        if column is None:
            return ""
        return row.get(column).strip()

    def _validate_name(self, value: str, row_index: int, errors: list[ImportRowError]) -> str:
        if not value:
            errors.append(self._error(row_index, CanonicalField.NAME, "", "Name is required"))
        elif not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
            errors.append(
                self._error(
                    row_index,
                    CanonicalField.NAME,
                    value,
                    f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
                )
            )
        return value

    def _validate_email(self, value: str, row_index: int, errors: list[ImportRowError]) -> str:
        normalized = value.lower()
        if not normalized:
            errors.append(self._error(row_index, CanonicalField.EMAIL, "", "Email is required"))
        elif len(normalized) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(normalized):
            errors.append(self._error(row_index, CanonicalField.EMAIL, value, "Invalid email format"))
        return normalized

    def _validate_choice(
        self,
        *,
        value: str,
        field: CanonicalField,
        allowed: tuple[str, ...],
        label: str,
        row_index: int,
        errors: list[ImportRowError],
    ) -> str | None:
        if not value:
            return None
        normalized = value.lower()
        if normalized not in allowed:
            errors.append(
                self._error(
                    row_index,
                    field,
                    value,
                    f"Invalid {label}. Must be one of: {', '.join(allowed)}",
                )
            )
            return None
        return normalized

    def _validate_registered_at(
        self,
        value: str,
        row_index: int,
        errors: list[ImportRowError],
    ) -> datetime | None:
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            try:
                parsed_date = date.fromisoformat(value)
            except ValueError:
                errors.append(
                    self._error(
                        row_index,
                        CanonicalField.REGISTERED_AT,
                        value,
                        "Invalid date format. Use ISO 8601 format (YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss)",
                    )
                )
                return None
            parsed = datetime(parsed_date.year, parsed_date.month, parsed_date.day)

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def _error(row_index: int, field: CanonicalField, value: str, message: str) -> ImportRowError:
        return ImportRowError(row=row_index, field=field.value, value=value, message=message)
