"""
Input validators: framework-agnostic, pure functions.

All validators are stateless and return plain booleans; callers decide
which message to surface.
"""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")
_CODE_RE = re.compile(r"^[0-9]{6}$")

# California ZIP codes range from 90001 to 96162
CA_ZIP_MIN = 90001
CA_ZIP_MAX = 96162


def validate_email(email: str) -> bool:
    """Return True if *email* looks like ``local@domain.tld`` with no whitespace."""
    return bool(_EMAIL_RE.match(email or ""))


def validate_phone(phone: str) -> bool:
    """Return True if *phone* has at least 10 digits/separators.

    Accepts an optional leading ``+`` followed by digits, spaces, dashes
    and parentheses.
    """
    return bool(_PHONE_RE.match((phone or "").strip()))


def validate_ca_zip_code(zip_code: str) -> bool:
    """Return True if *zip_code* is a 5-digit California ZIP (90001-96162)."""
    value = (zip_code or "").strip()
    if len(value) != 5 or not (value.isascii() and value.isdigit()):
        return False
    return CA_ZIP_MIN <= int(value) <= CA_ZIP_MAX


def verification_code_error(code: str) -> str | None:
    """Return the inline error for a malformed verification code, or None."""
    if not code:
        return "Verification code is required"
    if len(code) != 6:
        return "Verification code must be 6 digits"
    if not _CODE_RE.match(code):
        return "Verification code must contain only numbers"
    return None
