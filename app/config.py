"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
MAX_ROWS = 10_000


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class AttendeeImportSettings:
    """
    Runtime settings for attendee CSV imports.
    """

    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    max_rows: int = MAX_ROWS
    preview_rows: int = 10
    sanitize_cells: bool = True
    log_validation_errors: bool = True


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for outbound API clients.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class EmailSettings:
    """
    Transactional email provider settings.
    """

    enabled: bool = True
    api_key: str | None = None
    base_url: str = "https://api.resend.com/emails"
    from_address: str = "events@yourdomain.com"
    app_url: str = "http://localhost:3000"


@lru_cache(maxsize=1)
def get_attendee_import_settings() -> AttendeeImportSettings:
    """
    Return cached attendee import settings from environment variables.
    """

    return AttendeeImportSettings(
        max_file_size_bytes=max(1, _get_int_env("ATTENDEE_IMPORT_MAX_FILE_SIZE_BYTES", MAX_FILE_SIZE_BYTES)),
        max_rows=max(1, _get_int_env("ATTENDEE_IMPORT_MAX_ROWS", MAX_ROWS)),
        preview_rows=max(1, _get_int_env("ATTENDEE_IMPORT_PREVIEW_ROWS", 10)),
        sanitize_cells=_get_bool_env("ATTENDEE_IMPORT_SANITIZE_CELLS", True),
        log_validation_errors=_get_bool_env("ATTENDEE_IMPORT_LOG_VALIDATION_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared outbound HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_email_settings() -> EmailSettings:
    """
    Return email provider settings from environment variables.
    """

    return EmailSettings(
        enabled=_get_bool_env("EMAIL_ENABLED", True),
        api_key=_get_optional_str_env("RESEND_API_KEY"),
        base_url=_get_str_env("RESEND_API_URL", "https://api.resend.com/emails"),
        from_address=_get_str_env("EMAIL_FROM", "events@yourdomain.com"),
        app_url=_get_str_env("APP_URL", "http://localhost:3000").rstrip("/"),
    )
