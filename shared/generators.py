"""
Random code and identifier generators: pure, side-effect-free functions.

All generators draw from the ``secrets`` module.
"""

from __future__ import annotations

import secrets

VERIFICATION_CODE_MIN = 100_000
VERIFICATION_CODE_MAX = 999_999


def generate_verification_code() -> str:
    """Generate a 6-digit numeric one-time code.

    Uniform over ``[100000, 999999]`` so the code never has a leading zero.
    """
    span = VERIFICATION_CODE_MAX - VERIFICATION_CODE_MIN + 1
    return str(VERIFICATION_CODE_MIN + secrets.randbelow(span))


def generate_flow_id(length: int = 24) -> str:
    """Generate an opaque URL-safe identifier for an auth flow session.

    Args:
        length: Number of random bytes before base64 encoding (default 24).
    """
    return secrets.token_urlsafe(length)


def generate_document_id() -> str:
    """Generate a short hex identifier for an embedded document entry."""
    return secrets.token_hex(6)
