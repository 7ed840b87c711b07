"""
app/validators/duplicate_detector.py

Two-phase duplicate classification: within the uploaded file, then against
registrations already stored for the event.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.attendee_import import AttendeeCandidate, CanonicalField, ImportErrorType, ImportRowError


def email_key(email: str) -> str:
    return email.strip().lower()


class DuplicateDetector:
    """
    Incremental duplicate classifier.

    Candidates must be observed in file order; only rows that passed field
    validation should be observed.
    """

    def __init__(self, existing_emails: Iterable[str] = ()) -> None:
        self._existing = {email_key(email) for email in existing_emails}
        self._first_seen: dict[str, int] = {}

    def observe(self, candidate: AttendeeCandidate) -> ImportRowError | None:
        """
        Classify one candidate and remember its email for later rows.
        """

        key = email_key(candidate.email)
        first_row = self._first_seen.get(key)
        if first_row is not None:
            return ImportRowError(
                row=candidate.row,
                field=CanonicalField.EMAIL.value,
                value=candidate.email,
                message=f"Duplicate email found in file (first occurrence at row {first_row})",
                type=ImportErrorType.DUPLICATE_IN_FILE,
            )

        self._first_seen[key] = candidate.row
        if key in self._existing:
            return ImportRowError(
                row=candidate.row,
                field=CanonicalField.EMAIL.value,
                value=candidate.email,
                message="Email already registered for this event",
                type=ImportErrorType.DUPLICATE_IN_DB,
            )
        return None

    def classify(self, candidates: Iterable[AttendeeCandidate]) -> list[ImportRowError]:
        findings: list[ImportRowError] = []
        for candidate in candidates:
            finding = self.observe(candidate)
            if finding is not None:
                findings.append(finding)
        return findings
