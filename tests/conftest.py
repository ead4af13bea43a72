"""
Shared test fixtures and doubles.

Nothing here opens a network connection: the key-value store is the
in-process implementation, email delivery is recorded in memory, and the
auth backend is a dict of accounts.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from infrastructure.auth_backend.events import AuthEventBus
from infrastructure.auth_backend.protocol import AuthEvent, AuthResult, AuthSession
from infrastructure.storage.memory_store import InMemoryKeyValueStore

# AppSettings requires a MONGODB_URI; no connection is ever made with it
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/")

EPOCH = datetime(2025, 6, 13, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class RecordingEmailProvider:
    def __init__(self, deliver: bool = True) -> None:
        self.deliver = deliver
        self.codes: list[tuple[str, str, int]] = []
        self.welcomed: list[str] = []

    async def send_verification_code(
        self, email: str, code: str, expires_in_minutes: int
    ) -> bool:
        self.codes.append((email, code, expires_in_minutes))
        return self.deliver

    async def send_welcome_email(self, email: str) -> bool:
        self.welcomed.append(email)
        return self.deliver

    @property
    def last_code(self) -> Optional[str]:
        return self.codes[-1][1] if self.codes else None


class FakeAuthBackend:
    """In-memory AuthBackend keyed by lowercase email."""

    def __init__(self, accounts: Optional[dict[str, str]] = None) -> None:
        self.accounts = {k.lower(): v for k, v in (accounts or {}).items()}
        self.calls: list[tuple[str, str]] = []
        self.events = AuthEventBus()

    def _session(self, email: str) -> AuthSession:
        return AuthSession(
            access_token=f"token-for-{email}",
            user_id=f"user-{email}",
            email=email,
            refresh_token="refresh",
            expires_in=3600,
        )

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self.calls.append(("sign_in", email))
        if self.accounts.get(email.lower()) != password:
            return AuthResult.failure("Invalid login credentials")
        session = self._session(email.lower())
        self.events.emit(AuthEvent.SIGNED_IN, session)
        return AuthResult.success(session)

    async def sign_up(self, email: str, password: str) -> AuthResult:
        self.calls.append(("sign_up", email))
        if email.lower() in self.accounts:
            return AuthResult.failure("User already registered")
        self.accounts[email.lower()] = password
        return AuthResult.success(
            message="Account created successfully! Please check your email to verify your account."
        )

    async def sign_out(self, access_token: str) -> AuthResult:
        self.calls.append(("sign_out", access_token))
        self.events.emit(AuthEvent.SIGNED_OUT, None)
        return AuthResult.success()

    async def request_password_reset(self, email: str) -> AuthResult:
        self.calls.append(("request_password_reset", email))
        return AuthResult.success(message="Password reset instructions sent.")

    async def update_password(self, access_token: str, new_password: str) -> AuthResult:
        self.calls.append(("update_password", access_token))
        return AuthResult.success()

    async def reset_password(self, email: str, new_password: str) -> AuthResult:
        self.calls.append(("reset_password", email))
        if email.lower() not in self.accounts:
            return AuthResult.failure("Unable to reset password for this account.")
        self.accounts[email.lower()] = new_password
        self.events.emit(AuthEvent.USER_UPDATED, None)
        return AuthResult.success()

    def subscribe(self, listener):
        return self.events.subscribe(listener)

    def called(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def email_provider():
    return RecordingEmailProvider()


@pytest.fixture
def auth_backend():
    return FakeAuthBackend({"jane@example.com": "Secret123!"})
