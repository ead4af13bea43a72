"""
FastAPI application factory.
create_app() is the single entry point for building the app.

The lifespan opens the external clients (MongoDB, optional Redis, HTTP),
picks the auth backend, and hands everything to wire_services(), which
builds the repositories and services and stores them on app.state for the
dependency providers.
"""

from __future__ import annotations

import secrets
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings, JWTSettings
from errors import register_error_handlers
from infrastructure.auth_backend.events import AuthEventBus
from infrastructure.auth_backend.local import LocalAuthBackend
from infrastructure.auth_backend.protocol import (
    AuthBackend,
    AuthEvent,
    AuthListener,
    AuthSession,
)
from infrastructure.auth_backend.supabase import SupabaseAuthBackend
from infrastructure.auth_backend.tokens import TokenService
from infrastructure.email.log_provider import LoggingEmailProvider
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.storage.memory_store import InMemoryKeyValueStore
from infrastructure.storage.protocol import KeyValueStore
from infrastructure.storage.redis_client import create_redis_client
from infrastructure.storage.redis_store import RedisKeyValueStore
from infrastructure.webhook.discord import DiscordWebhookProvider
from infrastructure.webhook.protocol import WebhookProvider
from repositories import indexes
from repositories.business_repository import (
    ApplicationRepository,
    BusinessProfileRepository,
    OrderRepository,
)
from repositories.profile_repository import TeamMemberRepository, UserProfileRepository
from repositories.user_repository import UserRepository
from routes.admin_routes import router as admin_router
from routes.auth_routes import router as auth_router
from routes.contact_routes import router as contact_router
from routes.dashboard_routes import router as dashboard_router
from routes.formation_routes import router as formation_router
from routes.health_routes import router as health_router
from services.admin_service import AdminService
from services.auth.flow_service import AuthFlowService
from services.auth.session_store import FlowSessionStore
from services.contact_service import ContactService
from services.dashboard_service import DashboardService
from services.export_service import ExportService
from services.formation_service import FormationService
from services.onboarding_store import OnboardingStore
from services.pricing_service import PricingService
from shared.logging import configure_logging, get_logger, mask_email

log = get_logger(__name__)


def resolve_jwt_settings(settings: AppSettings) -> JWTSettings:
    """Return the JWT settings, inventing a per-process secret outside production."""
    if settings.jwt.jwt_secret:
        return settings.jwt
    if settings.is_production:
        raise RuntimeError("JWT_SECRET must be set in production")
    log.warning("jwt_secret_ephemeral", reason="JWT_SECRET not set")
    return settings.jwt.model_copy(update={"jwt_secret": secrets.token_urlsafe(32)})


def auth_event_logger(settings: AppSettings) -> AuthListener:
    def listener(event: AuthEvent, session: Optional[AuthSession]) -> None:
        email = session.email if session else None
        if event == AuthEvent.SIGNED_IN and settings.is_admin_email(email):
            log.info("admin_signed_in", email=mask_email(email))
        else:
            log.debug("auth_event", auth_event=event.value, email=mask_email(email))

    return listener


def wire_services(
    app: FastAPI,
    settings: AppSettings,
    *,
    db: AsyncDatabase,
    store: KeyValueStore,
    auth_backend: AuthBackend,
    token_service: TokenService,
    email_provider: EmailProvider,
    webhook: WebhookProvider,
) -> None:
    """Build repositories and services over the given clients onto app.state."""
    users_profiles = UserProfileRepository(db[indexes.USER_PROFILES])
    team_members = TeamMemberRepository(db[indexes.TEAM_MEMBERS])
    business_profiles = BusinessProfileRepository(db[indexes.BUSINESS_PROFILES])
    applications = ApplicationRepository(db[indexes.APPLICATIONS])
    orders = OrderRepository(db[indexes.ORDERS])
    onboarding = OnboardingStore(store)

    app.state.settings = settings
    app.state.store = store
    app.state.auth_backend = auth_backend
    app.state.token_service = token_service
    app.state.auth_flow_service = AuthFlowService(
        backend=auth_backend,
        sessions=FlowSessionStore(store, settings.redis.flow_session_ttl_seconds),
        store=store,
        notifier=email_provider,
        settings=settings.auth_flow,
        is_admin_email=settings.is_admin_email,
    )
    app.state.formation_service = FormationService(
        applications, business_profiles, onboarding
    )
    app.state.pricing_service = PricingService(orders, business_profiles, onboarding)
    app.state.dashboard_service = DashboardService(
        users_profiles, team_members, business_profiles, orders, onboarding
    )
    app.state.admin_service = AdminService(business_profiles)
    app.state.export_service = ExportService(
        {
            "business_profiles": business_profiles,
            "user_profiles": users_profiles,
            "team_members": team_members,
        }
    )
    app.state.contact_service = ContactService(webhook)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    configure_logging(
        settings.logging.log_level, settings.logging.log_format, settings.env
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        await indexes.ensure_indexes(db)

        # Redis is optional; without it state lives in this process only
        redis_client = await create_redis_client(settings.redis.redis_uri)
        app.state.redis = redis_client
        store: KeyValueStore = (
            RedisKeyValueStore(redis_client)
            if redis_client is not None
            else InMemoryKeyValueStore()
        )

        auth_http = HttpClient(timeout=10.0)
        email_http = HttpClient(timeout=10.0)
        webhook_http = HttpClient(timeout=5.0)

        email_provider: EmailProvider
        if settings.email.zepto_api_token:
            email_provider = ZeptoMailProvider(
                settings.email,
                email_http,
                app_url=settings.app_url,
                app_name=settings.app_name,
            )
        else:
            email_provider = LoggingEmailProvider()

        token_service = TokenService(resolve_jwt_settings(settings))
        events = AuthEventBus()
        auth_backend: AuthBackend
        if settings.auth_flow.auth_backend == "supabase":
            if not settings.supabase.is_configured:
                raise RuntimeError(
                    "AUTH_BACKEND=supabase requires SUPABASE_URL and SUPABASE_ANON_KEY"
                )
            auth_backend = SupabaseAuthBackend(settings.supabase, auth_http, events)
        else:
            auth_backend = LocalAuthBackend(
                UserRepository(db[indexes.USERS]),
                token_service,
                events,
                email_provider,
            )
        unsubscribe = auth_backend.subscribe(auth_event_logger(settings))

        wire_services(
            app,
            settings,
            db=db,
            store=store,
            auth_backend=auth_backend,
            token_service=token_service,
            email_provider=email_provider,
            webhook=DiscordWebhookProvider(settings.contact_webhook, webhook_http),
        )
        log.info(
            "app_started",
            env=settings.env,
            auth_backend=settings.auth_flow.auth_backend,
            store="redis" if redis_client is not None else "memory",
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        unsubscribe()
        for client in (auth_http, email_http, webhook_http):
            await client.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(formation_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)
    app.include_router(contact_router)

    return app
