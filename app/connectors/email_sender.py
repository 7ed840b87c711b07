"""
app/connectors/email_sender.py

Transactional email abstraction and the Resend HTTP client.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import requests

from app.config import EmailSettings, ExternalHTTPSettings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class EmailDeliveryError(RuntimeError):
    """
    Raised when an email cannot be handed to the provider after retries.
    """


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    tags: dict[str, str] = field(default_factory=dict)


class EmailSender(ABC):
    """
    Sends one message to one address.
    """

    @abstractmethod
    def send(self, message: EmailMessage) -> str:
        """
        Send the message and return the provider message id.
        """


class DisabledEmailSender(EmailSender):
    """
    Sender used when email delivery is switched off or not configured.
    """

    def __init__(self, reason: str) -> None:
        self._reason = reason

    def send(self, message: EmailMessage) -> str:
        raise EmailDeliveryError(f"Email delivery is disabled: {self._reason}")


class ResendEmailSender(EmailSender):
    """
    Email sender backed by the Resend REST API.
    """

    def __init__(
        self,
        *,
        settings: EmailSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        if not settings.api_key:
            raise ValueError("RESEND_API_KEY is required for ResendEmailSender.")
        self._settings = settings
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier

    def send(self, message: EmailMessage) -> str:
        payload: dict[str, Any] = {
            "from": self._settings.from_address,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.tags:
            payload["tags"] = [{"name": name, "value": value} for name, value in message.tags.items()]

        response = self._request(payload)
        try:
            body = response.json()
        except ValueError as exc:
            raise EmailDeliveryError("Email provider response was not valid JSON.") from exc
        return str(body.get("id", "")) if isinstance(body, dict) else ""

    def _request(self, payload: dict[str, Any]) -> requests.Response:
        """
        POST one message with exponential backoff on retryable failures.
        """

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.post(
                    self._settings.base_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._settings.api_key}"},
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Email request failed status=%s to=%r error=%s",
                        status_code,
                        payload["to"],
                        exc,
                    )
                    raise EmailDeliveryError("Email provider rejected the message.") from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            except requests.RequestException as exc:
                logger.error("Email request could not be sent to=%r error=%s", payload["to"], exc)
                raise EmailDeliveryError("Email request could not be sent.") from exc

            if attempt < self._max_retries:
                delay = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
                logger.warning(
                    "Retrying email request attempt=%s/%s delay=%.2fs error=%s",
                    attempt + 1,
                    self._max_retries,
                    delay,
                    last_error,
                )
                time.sleep(delay)

        raise EmailDeliveryError("Email provider unreachable after retries.") from last_error


def build_email_sender(settings: EmailSettings, http_settings: ExternalHTTPSettings) -> EmailSender:
    if not settings.enabled:
        return DisabledEmailSender("EMAIL_ENABLED is false")
    if not settings.api_key:
        logger.error("RESEND_API_KEY is missing; confirmation emails will not be sent.")
        return DisabledEmailSender("RESEND_API_KEY is not configured")
    return ResendEmailSender(settings=settings, http_settings=http_settings)
