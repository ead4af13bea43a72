"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Long-lived objects are built once in the app
lifespan and stored on app.state; providers only hand them out, so tests
can swap any of them by populating app.state differently.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import AuthenticationError, ForbiddenError
from infrastructure.auth_backend.protocol import AuthBackend
from infrastructure.auth_backend.tokens import TokenService
from services.admin_service import AdminService
from services.auth.flow_service import AuthFlowService
from services.auth.identity import CurrentUser
from services.contact_service import ContactService
from services.dashboard_service import DashboardService
from services.export_service import ExportService
from services.formation_service import FormationService
from services.pricing_service import PricingService
from shared.ip_utils import get_client_key

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_auth_backend(request: Request) -> AuthBackend:
    return request.app.state.auth_backend


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_flow_service(request: Request) -> AuthFlowService:
    return request.app.state.auth_flow_service


def get_formation_service(request: Request) -> FormationService:
    return request.app.state.formation_service


def get_pricing_service(request: Request) -> PricingService:
    return request.app.state.pricing_service


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service


def get_admin_service(request: Request) -> AdminService:
    return request.app.state.admin_service


def get_export_service(request: Request) -> ExportService:
    return request.app.state.export_service


def get_contact_service(request: Request) -> ContactService:
    return request.app.state.contact_service


def client_key(request: Request) -> str:
    """Throttling key for the caller (``X-Client-Id`` header, else IP)."""
    return get_client_key(request)


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_access_token),
    tokens: TokenService = Depends(get_token_service),
    settings: AppSettings = Depends(get_settings),
) -> CurrentUser:
    """Resolve the bearer token to the calling user.

    Raises AuthenticationError (401) for missing, expired or invalid tokens.
    """
    claims = tokens.verify(token)
    email = claims.get("email") or ""
    return CurrentUser(
        user_id=str(claims["sub"]),
        email=email,
        is_admin=settings.is_admin_email(email),
    )


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise ForbiddenError("Administrator access required")
    return user
