"""WebhookProvider protocol: the contact service depends on this, not on Discord."""

from typing import Any, Protocol


class WebhookProvider(Protocol):
    @property
    def is_configured(self) -> bool: ...

    async def send(self, payload: dict[str, Any]) -> bool: ...
