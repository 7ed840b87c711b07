"""
app/services/registration_codes.py

Short check-in codes assigned to imported attendees.
"""

from __future__ import annotations

import secrets

# I, O, 0 and 1 are left out because they are easy to misread at check-in.
REGISTRATION_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REGISTRATION_CODE_LENGTH = 9


def generate_registration_code(length: int = REGISTRATION_CODE_LENGTH) -> str:
    return "".join(secrets.choice(REGISTRATION_CODE_ALPHABET) for _ in range(length))
