"""
app/domain/attendee_import.py

Domain models used by the attendee CSV import flow.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


class CanonicalField(str, Enum):
    """
    Attendee attributes the import pipeline understands natively.
    """

    NAME = "name"
    EMAIL = "email"
    TICKET_TYPE = "ticketType"
    PAYMENT_STATUS = "paymentStatus"
    EMAIL_STATUS = "emailStatus"
    REGISTERED_AT = "registeredAt"


REQUIRED_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.NAME,
    CanonicalField.EMAIL,
    CanonicalField.TICKET_TYPE,
)


@dataclass(frozen=True)
class CustomField:
    """
    Free-form column carried verbatim into the registration's custom data.
    """

    key: str


FieldTarget = Union[CanonicalField, CustomField]


class DuplicateStrategy(str, Enum):
    SKIP = "skip"
    CREATE = "create"


class ImportErrorType(str, Enum):
    VALIDATION = "validation"
    DUPLICATE_IN_FILE = "duplicate_in_file"
    DUPLICATE_IN_DB = "duplicate_in_db"


class ImportStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Parsed file
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedRow:
    """
    One data row of an uploaded file, keyed by trimmed column header.

    ``index`` is 1-based and excludes the header row.
    """

    index: int
    values: Mapping[str, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, column: str) -> str:
        return self.values.get(column, "")


@dataclass(frozen=True)
class ParsedFile:
    file_name: str | None
    columns: tuple[str, ...]
    rows: tuple[ParsedRow, ...]
    size_bytes: int

    @property
    def total_rows(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Field mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldMapping:
    """
    Confirmed column -> target mapping.

    A column mapped to ``None`` is excluded from the import entirely. A column
    absent from ``targets`` is treated as a custom field keyed by its header.
    """

    targets: Mapping[str, FieldTarget | None]

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", MappingProxyType(dict(self.targets)))

    def column_for(self, canonical: CanonicalField) -> str | None:
        for column, target in self.targets.items():
            if target is canonical:
                return column
        return None

    def target_for(self, column: str) -> FieldTarget | None:
        if column not in self.targets:
            return CustomField(key=column)
        return self.targets[column]

    def custom_columns(self, columns: tuple[str, ...] | list[str]) -> list[tuple[str, str]]:
        """
        Return ``(column, custom_key)`` pairs for every custom column, in file order.
        """

        pairs: list[tuple[str, str]] = []
        for column in columns:
            target = self.target_for(column)
            if isinstance(target, CustomField):
                pairs.append((column, target.key))
        return pairs

    def to_wire(self) -> dict[str, str | None]:
        wire: dict[str, str | None] = {}
        for column, target in self.targets.items():
            if target is None:
                wire[column] = None
            elif isinstance(target, CustomField):
                wire[column] = f"custom:{target.key}"
            else:
                wire[column] = target.value
        return wire


# ---------------------------------------------------------------------------
# Collaborator views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventInfo:
    id: str
    name: str
    slug: str
    organizer_id: str
    start_date: datetime | None = None


@dataclass(frozen=True)
class TicketTypeInfo:
    id: str
    name: str
    capacity: int | None = None
    sold: int = 0

    @property
    def available(self) -> int | None:
        if self.capacity is None:
            return None
        return max(0, self.capacity - self.sold)


class TicketTypeIndex:
    """
    Case-insensitive lookup of an event's ticket types by name.
    """

    def __init__(self, ticket_types: list[TicketTypeInfo] | tuple[TicketTypeInfo, ...]) -> None:
        self._ticket_types = tuple(ticket_types)
        self._by_name: dict[str, TicketTypeInfo] = {}
        for ticket_type in self._ticket_types:
            self._by_name.setdefault(ticket_type.name.strip().lower(), ticket_type)

    def resolve(self, name: str) -> TicketTypeInfo | None:
        return self._by_name.get(name.strip().lower())

    def __iter__(self):
        return iter(self._ticket_types)

    def __len__(self) -> int:
        return len(self._ticket_types)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportRowError:
    """
    One row-level validation or duplicate finding.
    """

    row: int
    field: str
    value: str
    message: str
    type: ImportErrorType = ImportErrorType.VALIDATION


@dataclass(frozen=True)
class ImportWarning:
    """
    Non-blocking notice that is not tied to a single row.
    """

    field: str
    value: str
    message: str


@dataclass(frozen=True)
class AttendeeCandidate:
    """
    A row that passed field validation, normalized for persistence.
    """

    row: int
    email: str
    name: str
    ticket_type: TicketTypeInfo
    payment_status: str | None
    email_status: str | None
    registered_at: datetime | None
    custom_data: Mapping[str, str]


@dataclass(frozen=True)
class ValidationReport:
    total_rows: int
    valid_rows: int
    invalid_rows: int
    in_file_duplicates: int
    database_duplicates: int
    errors: list[ImportRowError] = field(default_factory=list)
    warnings: list[ImportWarning] = field(default_factory=list)

    @property
    def duplicates(self) -> int:
        return self.in_file_duplicates + self.database_duplicates


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistrationInput:
    """
    Shape handed to the registration store for one imported attendee.
    """

    event_id: str
    email: str
    name: str
    ticket_type_id: str
    payment_status: str
    email_status: str
    custom_data: dict[str, str]
    registered_at: datetime | None = None


@dataclass(frozen=True)
class RowCreated:
    row: int
    registration_id: uuid.UUID | str
    registration_code: str
    email: str


@dataclass(frozen=True)
class RowSkipped:
    row: int
    reason: ImportErrorType
    email: str


@dataclass(frozen=True)
class RowFailure:
    row: int
    field: str
    value: str
    message: str
    values: Mapping[str, str] = field(default_factory=dict)


RowResult = Union[RowCreated, RowSkipped, RowFailure]


@dataclass(frozen=True)
class ImportOutcome:
    status: ImportStatus
    success_count: int
    failure_count: int
    skipped_count: int
    failures: list[RowFailure] = field(default_factory=list)
    created: list[RowCreated] = field(default_factory=list)
    emails_sent: int = 0
    emails_failed: int = 0

    @property
    def attempted_rows(self) -> int:
        return self.success_count + self.failure_count + self.skipped_count
