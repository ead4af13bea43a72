"""EmailProvider used when no mail transport is configured.

Records that a message would have been sent. The code itself never reaches
the log (it is in the redaction list, and is not passed anyway).
"""

from shared.logging import get_logger, mask_email

log = get_logger(__name__)


class LoggingEmailProvider:
    async def send_verification_code(
        self, email: str, code: str, expires_in_minutes: int
    ) -> bool:
        log.warning(
            "email_transport_not_configured",
            kind="verification_code",
            to_email=mask_email(email),
            expires_in_minutes=expires_in_minutes,
        )
        return True

    async def send_welcome_email(self, email: str) -> bool:
        log.info(
            "email_transport_not_configured",
            kind="welcome",
            to_email=mask_email(email),
        )
        return True
