"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Sub-configs are separate BaseSettings classes so each concern can be
instantiated and tested on its own; AppSettings composes them in a
model_validator.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "formation-portal"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional; without Redis the key-value store falls back to process memory
    redis_uri: Optional[str] = None
    flow_session_ttl_seconds: int = 1800


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase signs its access tokens with HS256 and aud="authenticated";
    # the local backend issues tokens with the same shape.
    jwt_secret: str = ""
    jwt_audience: str = "authenticated"
    jwt_issuer: str = ""  # empty => issuer claim is not checked
    access_token_ttl_seconds: int = 3600


class SupabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    supabase_url: str = ""
    supabase_anon_key: str = ""
    # Needed only for verified-code password resets (admin API)
    supabase_service_role_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


class AuthFlowSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    auth_backend: Literal["local", "supabase"] = "local"

    max_login_attempts: int = Field(default=5, ge=1)
    login_lockout_seconds: int = Field(default=900, ge=1)  # 15 minutes

    verification_code_ttl_seconds: int = Field(default=300, ge=1)  # 5 minutes
    max_code_attempts: int = Field(default=3, ge=1)

    # Development/testing switch: echo the issued code in flow responses
    expose_verification_code: bool = False


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@xbyzeth.com"
    zepto_from_name: str = "XByzeth"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "https://xbyzeth.com"
    app_name: str = "XByzeth Formation Portal"

    cors_origins: list[str] = ["*"]

    # Accounts that get the administrator dashboard
    admin_emails: list[str] = ["info@xbyzeth.com"]

    # Contact form destination (Discord-compatible webhook)
    contact_webhook: str = ""

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    jwt: Optional[JWTSettings] = None
    supabase: Optional[SupabaseSettings] = None
    auth_flow: Optional[AuthFlowSettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.supabase is None:
            self.supabase = SupabaseSettings()
        if self.auth_flow is None:
            self.auth_flow = AuthFlowSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        self.admin_emails = [e.strip().lower() for e in self.admin_emails if e.strip()]
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def is_admin_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails
