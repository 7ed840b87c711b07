"""
app/connectors package marker.
"""

from app.connectors.email_sender import (
    DisabledEmailSender,
    EmailDeliveryError,
    EmailMessage,
    EmailSender,
    ResendEmailSender,
    build_email_sender,
)

__all__ = [
    "DisabledEmailSender",
    "EmailDeliveryError",
    "EmailMessage",
    "EmailSender",
    "ResendEmailSender",
    "build_email_sender",
]
