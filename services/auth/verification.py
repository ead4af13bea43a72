"""
Time-boxed one-time codes for the password-reset path.

A VerificationCodeIssuer wraps one flow's VerificationState. The code is
stored only as a SHA-256 digest; the plain code leaves through the email
provider and, when configured for development, the IssuedCode returned to
the caller.

Expiry is checked against the injected clock on every verify call.
Countdown timers shown to users are derived from ``time_remaining_ms``
and are never relied on for expiry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from errors import (
    IncorrectCodeError,
    VerificationExhaustedError,
    VerificationExpiredError,
    VerificationMissingError,
)
from infrastructure.email.protocol import EmailProvider
from schemas.models.auth_flow import VerificationState
from shared.crypto import digest_matches, hash_token
from shared.datetime_utils import Clock, ensure_aware, utc_now
from shared.generators import generate_verification_code
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

EXPIRED_MESSAGE = "Verification code has expired. Please request a new one."
EXHAUSTED_MESSAGE = "Too many incorrect attempts. Please request a new code."
MISSING_MESSAGE = "No verification code is active. Please request a new one."


@dataclass(frozen=True)
class IssuedCode:
    verification: VerificationState
    code: str
    delivered: bool


def incorrect_code_message(remaining: int) -> str:
    plural = "s" if remaining != 1 else ""
    return f"Incorrect code. {remaining} attempt{plural} remaining."


class VerificationCodeIssuer:
    def __init__(
        self,
        notifier: EmailProvider,
        *,
        clock: Clock = utc_now,
        expiry_seconds: int = 300,
        max_attempts: int = 3,
        state: Optional[VerificationState] = None,
        code_generator: Callable[[], str] = generate_verification_code,
    ) -> None:
        self._notifier = notifier
        self._clock = clock
        self.expiry = timedelta(seconds=expiry_seconds)
        self.max_attempts = max_attempts
        self._state = state
        self._generate = code_generator

    @property
    def state(self) -> Optional[VerificationState]:
        return self._state

    async def issue(self, email: str) -> IssuedCode:
        """Replace any current code with a fresh one for *email* and send it."""
        code = self._generate()
        self._state = VerificationState(
            email=email,
            code_hash=hash_token(code),
            expires_at=self._clock() + self.expiry,
            attempts=0,
        )
        expires_in_minutes = math.ceil(self.expiry.total_seconds() / 60)
        delivered = await self._notifier.send_verification_code(
            email, code, expires_in_minutes
        )
        log.info(
            "verification_code_issued",
            email=mask_email(email),
            delivered=delivered,
            expires_in_seconds=int(self.expiry.total_seconds()),
        )
        return IssuedCode(verification=self._state, code=code, delivered=delivered)

    async def reissue(self) -> IssuedCode:
        """Issue a new code to the same address, whatever the old attempt count."""
        if self._state is None:
            raise VerificationMissingError(MISSING_MESSAGE, field="verification_code")
        return await self.issue(self._state.email)

    def time_remaining_ms(self) -> int:
        if self._state is None:
            return 0
        remaining = ensure_aware(self._state.expires_at) - self._clock()
        return max(0, int(remaining.total_seconds() * 1000))

    def verify(self, candidate: str) -> str:
        """Check *candidate*; return the verified email on success.

        Raises VerificationExpiredError / VerificationExhaustedError (state
        discarded), IncorrectCodeError (attempt recorded, code still live) or
        VerificationMissingError when no code was issued.
        """
        state = self._state
        if state is None:
            raise VerificationMissingError(MISSING_MESSAGE, field="verification_code")

        if self._clock() >= ensure_aware(state.expires_at):
            self._state = None
            log.info("verification_code_expired", email=mask_email(state.email))
            raise VerificationExpiredError(EXPIRED_MESSAGE, field="verification_code")

        if state.attempts >= self.max_attempts:
            self._state = None
            raise VerificationExhaustedError(EXHAUSTED_MESSAGE, field="verification_code")

        if digest_matches(candidate, state.code_hash):
            self._state = None
            log.info("verification_code_verified", email=mask_email(state.email))
            return state.email

        attempts = state.attempts + 1
        remaining = self.max_attempts - attempts
        if remaining <= 0:
            self._state = None
            log.warning(
                "verification_code_exhausted",
                email=mask_email(state.email),
                attempts=attempts,
            )
            raise VerificationExhaustedError(EXHAUSTED_MESSAGE, field="verification_code")

        self._state = state.model_copy(update={"attempts": attempts})
        raise IncorrectCodeError(incorrect_code_message(remaining), remaining=remaining)
