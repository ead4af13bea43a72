"""
Unit test configuration.

Settings are read from the process environment only: dotenv loading is
patched out and the portal variables a developer shell may export are
cleared, so each test sets exactly what it needs with monkeypatch.setenv().
"""

import pytest

_PORTAL_ENV = (
    "ENV",
    "ADMIN_EMAILS",
    "AUTH_BACKEND",
    "JWT_SECRET",
    "JWT_ISSUER",
    "REDIS_URI",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "EXPOSE_VERIFICATION_CODE",
    "CONTACT_WEBHOOK",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
    for name in _PORTAL_ENV:
        monkeypatch.delenv(name, raising=False)
