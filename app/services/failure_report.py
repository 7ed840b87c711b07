"""
app/services/failure_report.py

CSV rendering of rows that failed to import, plus the blank import template.
"""

from __future__ import annotations

import csv
import io
from typing import Sequence

from app.domain.attendee_import import RowFailure

FAILURE_ROW_COLUMN = "Import Row"
FAILURE_ERROR_COLUMN = "Import Error"

TEMPLATE_COLUMNS: tuple[str, ...] = (
    "name",
    "email",
    "ticketType",
    "paymentStatus",
    "emailStatus",
    "company",
)
TEMPLATE_SAMPLE_ROW: tuple[str, ...] = (
    "Jane Doe",
    "jane.doe@example.com",
    "General Admission",
    "free",
    "active",
    "Example Corp",
)


def _render(header: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def build_failure_report(columns: Sequence[str], failures: Sequence[RowFailure]) -> str:
    """
    Render failed rows with their original columns so they can be fixed and
    re-uploaded. The two trailing columns hold the row number and the error.
    """

    header = [*columns, FAILURE_ROW_COLUMN, FAILURE_ERROR_COLUMN]
    rows = [
        [*(failure.values.get(column, "") for column in columns), failure.row, failure.message]
        for failure in sorted(failures, key=lambda item: item.row)
    ]
    return _render(header, rows)


def build_import_template() -> str:
    return _render(TEMPLATE_COLUMNS, [TEMPLATE_SAMPLE_ROW])
