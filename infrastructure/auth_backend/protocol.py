"""AuthBackend protocol: the flow service depends on this, not on Supabase
or the local user collection.

Every call resolves to an AuthResult. Backends never raise for a rejected
credential; the message they return is shown to the user verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str
    email: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    message: Optional[str] = None
    session: Optional[AuthSession] = None

    @classmethod
    def success(
        cls, session: Optional[AuthSession] = None, message: Optional[str] = None
    ) -> "AuthResult":
        return cls(ok=True, message=message, session=session)

    @classmethod
    def failure(cls, message: str) -> "AuthResult":
        return cls(ok=False, message=message)


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class AuthBackend(Protocol):
    async def sign_in(self, email: str, password: str) -> AuthResult: ...

    async def sign_up(self, email: str, password: str) -> AuthResult: ...

    async def sign_out(self, access_token: str) -> AuthResult: ...

    async def request_password_reset(self, email: str) -> AuthResult: ...

    async def update_password(
        self, access_token: str, new_password: str
    ) -> AuthResult: ...

    async def reset_password(self, email: str, new_password: str) -> AuthResult:
        """Set a new password for *email* after an out-of-band code check."""
        ...

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register *listener* for auth events; returns an unsubscribe callable."""
        ...
