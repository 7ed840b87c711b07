"""
app/parsers/csv_parser.py

Decoding and header-row parsing of uploaded attendee CSV files.
"""

from __future__ import annotations

import csv
import io
import logging

from app.config import MAX_FILE_SIZE_BYTES, MAX_ROWS
from app.domain.attendee_import import ParsedFile, ParsedRow

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"

# Leading characters that spreadsheet applications evaluate as formulas.
FORMULA_PREFIXES: tuple[str, ...] = ("=", "+", "-", "@", "\t", "\r")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVParseError(ValueError):
    """
    Raised when an uploaded file is rejected before any row is processed.
    """

    code = "invalid_csv"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class FileTooLargeError(CSVParseError):
    code = "file_too_large"


class TooManyRowsError(CSVParseError):
    code = "too_many_rows"


class EmptyFileError(CSVParseError):
    code = "empty_file"


class NoColumnsError(CSVParseError):
    code = "no_columns"


class MalformedCSVError(CSVParseError):
    code = "malformed_csv"


class InvalidEncodingError(CSVParseError):
    code = "invalid_encoding"


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class CSVFileParser:
    """
    Turns raw file content into ordered columns and immutable rows.
    """

    def __init__(
        self,
        *,
        max_file_size_bytes: int = MAX_FILE_SIZE_BYTES,
        max_rows: int = MAX_ROWS,
        sanitize_cells: bool = True,
    ) -> None:
        self._max_file_size_bytes = max_file_size_bytes
        self._max_rows = max_rows
        self._sanitize_cells = sanitize_cells

    def parse(self, content: str | bytes, file_name: str | None = None) -> ParsedFile:
        text = self._decode(content)
        if text.startswith(UTF8_BOM):
            text = text[1:]

        size_bytes = len(text.encode("utf-8"))
        if size_bytes > self._max_file_size_bytes:
            limit_mb = self._max_file_size_bytes / (1024 * 1024)
            raise FileTooLargeError(
                f"File exceeds {limit_mb:g}MB limit. Please split into smaller files."
            )

        columns, raw_rows, saw_header = self._read_records(text)

        if not saw_header:
            raise EmptyFileError(
                "CSV file is empty. Please upload a file with at least one row of data."
            )
        if all(not column for column in columns):
            raise NoColumnsError(
                "CSV file has no columns. Please ensure the first row contains column headers."
            )
        if len(raw_rows) > self._max_rows:
            raise TooManyRowsError(
                f"File exceeds {self._max_rows:,} row limit. Please split into smaller files."
            )
        if not raw_rows:
            raise EmptyFileError(
                "CSV file is empty. Please upload a file with at least one row of data."
            )

        rows = tuple(
            ParsedRow(
                index=index,
                values={column: self._clean_value(value) for column, value in zip(columns, raw)},
            )
            for index, raw in enumerate(raw_rows, start=1)
        )

        logger.debug(
            "Parsed attendee CSV file=%r columns=%s rows=%s bytes=%s",
            file_name,
            len(columns),
            len(rows),
            size_bytes,
        )
        return ParsedFile(
            file_name=file_name,
            columns=columns,
            rows=rows,
            size_bytes=size_bytes,
        )

    def _read_records(self, text: str) -> tuple[tuple[str, ...], list[list[str]], bool]:
        reader = csv.reader(io.StringIO(text, newline=""), strict=True)
        columns: tuple[str, ...] = ()
        rows: list[list[str]] = []
        saw_header = False

        try:
            for record in reader:
                if not saw_header:
                    if not record or (len(record) == 1 and not record[0].strip()):
                        continue
                    saw_header = True
                    columns = tuple(header.strip() for header in record)
                    self._check_unique_headers(columns)
                    continue
                if self._is_blank_record(record):
                    continue
                if len(record) != len(columns):
                    direction = "many" if len(record) > len(columns) else "few"
                    raise MalformedCSVError(
                        f"CSV parsing failed: Too {direction} fields: expected {len(columns)} "
                        f"fields but parsed {len(record)} (row {len(rows) + 1})"
                    )
                rows.append(record)
                # Stop early instead of materialising an oversized file.
                if len(rows) > self._max_rows:
                    break
        except csv.Error as exc:
            raise MalformedCSVError(f"CSV parsing failed: {exc}") from exc

        return columns, rows, saw_header

    def _clean_value(self, value: str) -> str:
        cleaned = value.strip()
        if self._sanitize_cells and cleaned.startswith(FORMULA_PREFIXES):
            return "'" + cleaned
        return cleaned

    @staticmethod
    def _decode(content: str | bytes) -> str:
        if isinstance(content, str):
            return content
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncodingError("CSV must be UTF-8 encoded.") from exc

    @staticmethod
    def _is_blank_record(record: list[str]) -> bool:
        return all(value.strip() == "" for value in record)

    @staticmethod
    def _check_unique_headers(columns: tuple[str, ...]) -> None:
        seen: set[str] = set()
        for column in columns:
            if column and column in seen:
                raise MalformedCSVError(f"CSV parsing failed: Duplicate column header '{column}'.")
            seen.add(column)
