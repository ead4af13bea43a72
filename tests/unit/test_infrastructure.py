"""Unit tests for the HTTP, email and webhook infrastructure."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config import EmailSettings
from infrastructure.email.log_provider import LoggingEmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.webhook.discord import (
    EMBED_FIELD_LIMIT,
    DiscordWebhookProvider,
    embed_field,
)


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    @pytest.mark.parametrize("method", ["get", "post", "put"])
    async def test_delegates_to_httpx(self, mocker, method):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, method, return_value=fake_resp)
        resp = await getattr(client, method)("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_propagates_transport_errors(self, mocker):
        client = HttpClient()
        mocker.patch.object(
            client._client, "post", side_effect=httpx.ConnectTimeout("timeout")
        )
        with pytest.raises(httpx.ConnectTimeout):
            await client.post("http://example.com")
        await client.aclose()

    async def test_context_manager(self):
        async with HttpClient() as client:
            assert client is not None


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@xbyzeth.com",
            zepto_from_name="XByzeth",
        )
        http = MagicMock()
        provider = ZeptoMailProvider(
            settings=settings, http_client=http, app_url="https://xbyzeth.com"
        )
        return provider, http

    async def test_verification_code_rendered_and_sent(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))

        assert await provider.send_verification_code("jane@example.com", "482913", 5) is True

        _, kwargs = http.post.call_args
        payload = kwargs["json"]
        assert payload["to"][0]["email_address"]["address"] == "jane@example.com"
        assert "482913" in payload["htmlbody"]
        assert "5 minutes" in payload["textbody"]

    async def test_welcome_email(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=201))
        assert await provider.send_welcome_email("jane@example.com") is True
        _, kwargs = http.post.call_args
        assert "https://xbyzeth.com/dashboard" in kwargs["json"]["textbody"]

    async def test_returns_false_when_token_empty(self):
        provider, http = self._make(token="")
        http.post = AsyncMock()
        assert await provider.send_verification_code("u@e.com", "000000", 5) is False
        http.post.assert_not_awaited()

    async def test_returns_false_on_non_2xx(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=422, text="Unprocessable"))
        assert await provider.send_verification_code("u@e.com", "000000", 5) is False

    async def test_returns_false_on_transport_error(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ConnectError("timeout"))
        assert await provider.send_welcome_email("u@e.com") is False

    @pytest.mark.parametrize(
        "token",
        ["rawtoken", "Zoho-enczapikey rawtoken"],
        ids=["bare", "already_prefixed"],
    )
    async def test_auth_header_prefixed_once(self, token):
        provider, http = self._make(token=token)
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_welcome_email("u@e.com")
        _, kwargs = http.post.call_args
        assert kwargs["headers"]["Authorization"] == "Zoho-enczapikey rawtoken"


async def test_logging_provider_reports_delivery():
    provider = LoggingEmailProvider()
    assert await provider.send_verification_code("jane@example.com", "123456", 5) is True
    assert await provider.send_welcome_email("jane@example.com") is True


# ── Discord webhook ───────────────────────────────────────────────────────────


class TestDiscordWebhookProvider:
    def _make(self, url="https://discord.com/api/webhooks/123/abc"):
        http = MagicMock()
        return DiscordWebhookProvider(webhook_url=url, http_client=http), http

    @pytest.mark.parametrize("status", [200, 204])
    async def test_success_statuses(self, status):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=status))
        assert await provider.send({"embeds": []}) is True

    async def test_returns_false_on_error_status(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=400, text="Bad Request"))
        assert await provider.send({}) is False

    async def test_not_configured(self):
        provider, http = self._make(url="")
        http.post = AsyncMock()
        assert provider.is_configured is False
        assert await provider.send({}) is False
        http.post.assert_not_awaited()

    async def test_returns_false_on_transport_error(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        assert await provider.send({}) is False


class TestEmbedField:
    def test_empty_value_shown_as_dash(self):
        assert embed_field("Phone", "") == {"name": "Phone", "value": "-", "inline": False}
        assert embed_field("Phone", None)["value"] == "-"

    def test_long_value_truncated(self):
        value = embed_field("Message", "x" * 2000, inline=True)["value"]
        assert len(value) == EMBED_FIELD_LIMIT
        assert value.endswith("...")
