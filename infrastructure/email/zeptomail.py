"""ZeptoMail implementation of EmailProvider.

Messages are rendered from Jinja2 templates under templates/emails and sent
through the ZeptoMail REST API. Delivery failures are logged and reported
as ``False``; they never raise.
"""

import os
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.com/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_url: str = "https://xbyzeth.com",
        app_name: str = "XByzeth",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_url = app_url
        self._app_name = app_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            return False

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": {"address": to_email, "name": to_email}}],
            "subject": subject,
            "htmlbody": html_body,
        }
        if text_body:
            payload["textbody"] = text_body

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                to_email=mask_email(to_email),
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code in (200, 201, 202):
            log.info("email_sent_success", to_email=mask_email(to_email), subject=subject)
            return True
        log.error(
            "email_sent_failed",
            to_email=mask_email(to_email),
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return False

    async def send_verification_code(
        self, email: str, code: str, expires_in_minutes: int
    ) -> bool:
        subject = f"Your verification code - {self._app_name}"
        template = self._jinja.get_template("verification_code.html")
        html_body = template.render(
            code=code,
            expires_in_minutes=expires_in_minutes,
            app_name=self._app_name,
            app_url=self._app_url,
        )
        text_body = (
            f"Reset Your Password - {self._app_name}\n\n"
            f"Your verification code is: {code}\n\n"
            f"This code expires in {expires_in_minutes} minutes. "
            f"If you did not request it, you can ignore this email."
        )
        return await self._send(email, subject, html_body, text_body)

    async def send_welcome_email(self, email: str) -> bool:
        subject = f"Welcome to {self._app_name}"
        template = self._jinja.get_template("welcome.html")
        html_body = template.render(app_name=self._app_name, app_url=self._app_url)
        text_body = (
            f"Welcome to {self._app_name}!\n\n"
            f"Start your business formation: {self._app_url}/dashboard"
        )
        return await self._send(email, subject, html_body, text_body)
