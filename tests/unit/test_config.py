"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    AuthFlowSettings,
    DatabaseSettings,
    JWTSettings,
    RedisSettings,
    SupabaseSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "formation-portal"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# RedisSettings
# ---------------------------------------------------------------------------


class TestRedisSettings:
    def test_redis_uri_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_flow_session_ttl_default(self, monkeypatch):
        monkeypatch.delenv("FLOW_SESSION_TTL_SECONDS", raising=False)
        assert RedisSettings().flow_session_ttl_seconds == 1800


# ---------------------------------------------------------------------------
# Auth settings
# ---------------------------------------------------------------------------


class TestAuthFlowSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "AUTH_BACKEND",
            "MAX_LOGIN_ATTEMPTS",
            "LOGIN_LOCKOUT_SECONDS",
            "VERIFICATION_CODE_TTL_SECONDS",
            "MAX_CODE_ATTEMPTS",
            "EXPOSE_VERIFICATION_CODE",
        ):
            monkeypatch.delenv(var, raising=False)
        s = AuthFlowSettings()
        assert s.auth_backend == "local"
        assert s.max_login_attempts == 5
        assert s.login_lockout_seconds == 900
        assert s.verification_code_ttl_seconds == 300
        assert s.max_code_attempts == 3
        assert s.expose_verification_code is False

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("AUTH_BACKEND", "firebase")
        with pytest.raises(PydanticValidationError):
            AuthFlowSettings()

    def test_zero_attempts_rejected(self, monkeypatch):
        monkeypatch.setenv("MAX_LOGIN_ATTEMPTS", "0")
        with pytest.raises(PydanticValidationError):
            AuthFlowSettings()


class TestJWTSettings:
    def test_supabase_compatible_defaults(self, monkeypatch):
        for var in ("JWT_SECRET", "JWT_AUDIENCE", "JWT_ISSUER", "ACCESS_TOKEN_TTL_SECONDS"):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.jwt_secret == ""
        assert s.jwt_audience == "authenticated"
        assert s.jwt_issuer == ""
        assert s.access_token_ttl_seconds == 3600


@pytest.mark.parametrize(
    "url, anon_key, expected",
    [
        ("https://abc.supabase.co", "anon", True),
        ("https://abc.supabase.co", "", False),
        ("", "anon", False),
    ],
    ids=["configured", "missing_key", "missing_url"],
)
def test_supabase_is_configured(monkeypatch, url, anon_key, expected):
    monkeypatch.setenv("SUPABASE_URL", url)
    monkeypatch.setenv("SUPABASE_ANON_KEY", anon_key)
    assert SupabaseSettings().is_configured is expected


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in (
            "db",
            "redis",
            "jwt",
            "supabase",
            "auth_flow",
            "email",
            "logging",
            "sentry",
        ):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["*"]

    def test_admin_emails_normalised(self, with_mongo):
        with_mongo.setenv("ADMIN_EMAILS", '[" Owner@XByzeth.com ", ""]')
        assert AppSettings().admin_emails == ["owner@xbyzeth.com"]

    @pytest.mark.parametrize(
        "email, expected",
        [
            ("info@xbyzeth.com", True),
            ("INFO@xbyzeth.com ", True),
            ("client@example.com", False),
            ("", False),
            (None, False),
        ],
        ids=["exact", "case_and_space", "other", "empty", "none"],
    )
    def test_is_admin_email(self, with_mongo, email, expected):
        with_mongo.delenv("ADMIN_EMAILS", raising=False)
        assert AppSettings().is_admin_email(email) is expected
