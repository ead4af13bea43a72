"""Discord webhook implementation of WebhookProvider.

Accepts a ready payload (callers build the embed) and reports delivery as
a boolean. Discord answers 204 on success, or 200 with ``?wait=true``.
"""

from typing import Any

import httpx

from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

# Discord rejects embeds whose field values exceed this
EMBED_FIELD_LIMIT = 1024


def embed_field(name: str, value: Any, inline: bool = False) -> dict[str, Any]:
    text = str(value) if value not in (None, "") else "-"
    if len(text) > EMBED_FIELD_LIMIT:
        text = text[: EMBED_FIELD_LIMIT - 3] + "..."
    return {"name": name, "value": text, "inline": inline}


class DiscordWebhookProvider:
    def __init__(self, webhook_url: str, http_client: HttpClient) -> None:
        self._webhook_url = webhook_url
        self._http = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, payload: dict[str, Any]) -> bool:
        if not self._webhook_url:
            log.warning("discord_webhook_not_configured")
            return False
        try:
            response = await self._http.post(self._webhook_url, json=payload)
        except httpx.HTTPError as e:
            log.error(
                "discord_webhook_request_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        if response.status_code in (200, 204):
            return True
        log.warning(
            "discord_webhook_failed",
            status_code=response.status_code,
            response_text=response.text[:200],
        )
        return False
