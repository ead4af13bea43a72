"""
Password strength evaluation: a pure function shared by the registration
and password-reset steps.

Five criteria each contribute one point to the score:
length >= 8, an uppercase letter, a lowercase letter, a digit, and a
special character. A password is acceptable when it scores at least 4
and is at least 8 characters long.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

MIN_LENGTH = 8
MIN_VALID_SCORE = 4

_SPECIAL_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

_CRITERIA: tuple[tuple[str, "re.Pattern[str] | None"], ...] = (
    ("Password must be at least 8 characters long", None),
    ("Include at least one uppercase letter", re.compile(r"[A-Z]")),
    ("Include at least one lowercase letter", re.compile(r"[a-z]")),
    ("Include at least one number", re.compile(r"[0-9]")),
    ("Include at least one special character", _SPECIAL_RE),
)


@dataclass(frozen=True)
class PasswordStrength:
    score: int = 0
    feedback: list[str] = field(default_factory=list)
    is_valid: bool = False

    @property
    def label(self) -> str:
        return strength_label(self.score)


def evaluate_password(password: str) -> PasswordStrength:
    """Score *password* against the five criteria.

    Returns:
        PasswordStrength with the score (0-5), one feedback message per
        unmet criterion in criterion order, and the validity verdict.
    """
    password = password or ""
    score = 0
    feedback: list[str] = []

    for message, pattern in _CRITERIA:
        if pattern is None:
            met = len(password) >= MIN_LENGTH
        else:
            met = bool(pattern.search(password))
        if met:
            score += 1
        else:
            feedback.append(message)

    is_valid = score >= MIN_VALID_SCORE and len(password) >= MIN_LENGTH
    return PasswordStrength(score=score, feedback=feedback, is_valid=is_valid)


def strength_label(score: int) -> str:
    """Human-readable label for a strength score."""
    if score <= 1:
        return "Very Weak"
    if score == 2:
        return "Weak"
    if score == 3:
        return "Fair"
    if score == 4:
        return "Good"
    return "Strong"
