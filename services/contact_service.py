"""Contact form delivery to the team's webhook (Discord embed)."""

from __future__ import annotations

from errors import ServiceUnavailableError, ValidationError
from infrastructure.webhook.discord import embed_field
from infrastructure.webhook.protocol import WebhookProvider
from schemas.dto.requests.contact import ContactRequest
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, mask_email
from shared.validators import validate_email

log = get_logger(__name__)

SENT_MESSAGE = "We've received your request and will contact you within 24 hours."
FAILED_MESSAGE = "Failed to submit form. Please try again."

_EMBED_COLOR = 9103397


class ContactService:
    def __init__(self, webhook: WebhookProvider, clock: Clock = utc_now) -> None:
        self._webhook = webhook
        self._clock = clock

    def _payload(self, req: ContactRequest) -> dict:
        return {
            "embeds": [
                {
                    "title": "New contact request",
                    "color": _EMBED_COLOR,
                    "fields": [
                        embed_field("Name", req.name, inline=True),
                        embed_field("Email", req.email, inline=True),
                        embed_field("Service", req.service, inline=True),
                        embed_field("Business", req.business, inline=True),
                        embed_field("Message", req.message),
                    ],
                    "timestamp": self._clock().isoformat(),
                }
            ]
        }

    async def submit(self, req: ContactRequest) -> str:
        if not validate_email(req.email.strip()):
            raise ValidationError("Please enter a valid email address", field="email")
        if not self._webhook.is_configured:
            log.error("contact_webhook_not_configured")
            raise ServiceUnavailableError(FAILED_MESSAGE)

        if not await self._webhook.send(self._payload(req)):
            log.error("contact_delivery_failed", email=mask_email(req.email))
            raise ServiceUnavailableError(FAILED_MESSAGE)

        log.info("contact_request_sent", email=mask_email(req.email), service=req.service)
        return SENT_MESSAGE
