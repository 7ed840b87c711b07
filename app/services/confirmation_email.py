"""
app/services/confirmation_email.py

Registration confirmation message rendering.
"""

from __future__ import annotations

from datetime import datetime
from html import escape

from app.connectors.email_sender import EmailMessage
from app.domain.attendee_import import EventInfo


def format_event_date(value: datetime | None) -> str:
    if value is None:
        return "To be announced"
    return value.strftime("%A, %B %d, %Y at %I:%M %p %Z").strip()


def render_registration_confirmation(
    *,
    event: EventInfo,
    attendee_name: str,
    attendee_email: str,
    ticket_type: str,
    registration_code: str,
    app_url: str,
) -> EmailMessage:
    event_url = f"{app_url}/events/{event.slug}"
    html = (
        "<html><body>"
        "<h1>Registration Confirmed!</h1>"
        f"<p>Hi {escape(attendee_name)},</p>"
        f"<p>Great news! You're all set for <strong>{escape(event.name)}</strong>.</p>"
        "<table>"
        f"<tr><td>Event:</td><td>{escape(event.name)}</td></tr>"
        f"<tr><td>Date:</td><td>{escape(format_event_date(event.start_date))}</td></tr>"
        f"<tr><td>Ticket Type:</td><td>{escape(ticket_type)}</td></tr>"
        f"<tr><td>Registration Code:</td><td><strong>{escape(registration_code)}</strong></td></tr>"
        "</table>"
        f'<p><a href="{escape(event_url, quote=True)}">View Event Details</a></p>'
        "<p>Please keep this email for your records. Your registration code is used at check-in.</p>"
        "</body></html>"
    )
    return EmailMessage(
        to=attendee_email,
        subject=f"Registration Confirmed: {event.name}",
        html=html,
        tags={"type": "registration-confirmation", "eventId": event.id},
    )
