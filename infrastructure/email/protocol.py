"""EmailProvider protocol: services depend on this, not the concrete implementation."""

from typing import Protocol


class EmailProvider(Protocol):
    async def send_verification_code(
        self, email: str, code: str, expires_in_minutes: int
    ) -> bool: ...

    async def send_welcome_email(self, email: str) -> bool: ...
