"""
Supabase (GoTrue) implementation of AuthBackend over the REST API.

Public calls authenticate with the project's anon key; the verified-code
password reset needs the service-role key and goes through the admin API.
Transport failures are logged and reported as a failed AuthResult.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx

from config import SupabaseSettings
from infrastructure.auth_backend.events import AuthEventBus
from infrastructure.auth_backend.protocol import (
    AuthEvent,
    AuthListener,
    AuthResult,
    AuthSession,
)
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

UNREACHABLE = "Unable to reach the authentication service. Please try again."
SIGNUP_CONFIRMATION = (
    "Account created successfully! Please check your email to verify your account."
)


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"Request failed ({response.status_code})"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"Request failed ({response.status_code})"


def _session_from(body: dict[str, Any]) -> Optional[AuthSession]:
    if not body.get("access_token"):
        return None
    user = body.get("user") or {}
    return AuthSession(
        access_token=body["access_token"],
        refresh_token=body.get("refresh_token"),
        user_id=str(user.get("id", "")),
        email=user.get("email", ""),
        expires_in=body.get("expires_in"),
    )


class SupabaseAuthBackend:
    def __init__(
        self,
        settings: SupabaseSettings,
        http_client: HttpClient,
        events: Optional[AuthEventBus] = None,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._events = events if events is not None else AuthEventBus()
        self._base = settings.supabase_url.rstrip("/") + "/auth/v1"

    def _headers(self, bearer: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self._settings.supabase_anon_key,
            "Authorization": f"Bearer {bearer or self._settings.supabase_anon_key}",
            "Content-Type": "application/json",
        }

    def _admin_headers(self) -> dict[str, str]:
        key = self._settings.supabase_service_role_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    async def _call(
        self, method: str, path: str, *, headers: dict[str, str], payload: dict
    ) -> Optional[httpx.Response]:
        send = self._http.put if method == "PUT" else self._http.post
        try:
            return await send(f"{self._base}{path}", json=payload, headers=headers)
        except httpx.HTTPError as e:
            log.error(
                "supabase_request_failed",
                path=path.split("?")[0],
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def sign_in(self, email: str, password: str) -> AuthResult:
        response = await self._call(
            "POST",
            "/token?grant_type=password",
            headers=self._headers(),
            payload={"email": email, "password": password},
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code != 200:
            log.info(
                "supabase_sign_in_rejected",
                email=mask_email(email),
                status_code=response.status_code,
            )
            return AuthResult.failure(_error_message(response))

        session = _session_from(response.json())
        if session is None:
            return AuthResult.failure("Sign-in response did not include a session")
        self._events.emit(AuthEvent.SIGNED_IN, session)
        return AuthResult.success(session)

    async def sign_up(self, email: str, password: str) -> AuthResult:
        response = await self._call(
            "POST",
            "/signup",
            headers=self._headers(),
            payload={"email": email, "password": password},
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code not in (200, 201):
            return AuthResult.failure(_error_message(response))

        # With email confirmation enabled GoTrue returns the user without a session
        session = _session_from(response.json())
        if session is not None:
            self._events.emit(AuthEvent.SIGNED_IN, session)
        return AuthResult.success(session, message=SIGNUP_CONFIRMATION)

    async def sign_out(self, access_token: str) -> AuthResult:
        response = await self._call(
            "POST", "/logout", headers=self._headers(bearer=access_token), payload={}
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code not in (200, 204):
            return AuthResult.failure(_error_message(response))
        self._events.emit(AuthEvent.SIGNED_OUT, None)
        return AuthResult.success()

    async def request_password_reset(self, email: str) -> AuthResult:
        response = await self._call(
            "POST", "/recover", headers=self._headers(), payload={"email": email}
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code != 200:
            return AuthResult.failure(_error_message(response))
        return AuthResult.success()

    async def update_password(self, access_token: str, new_password: str) -> AuthResult:
        response = await self._call(
            "PUT",
            "/user",
            headers=self._headers(bearer=access_token),
            payload={"password": new_password},
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code != 200:
            return AuthResult.failure(_error_message(response))
        self._events.emit(AuthEvent.USER_UPDATED, None)
        return AuthResult.success(message="Password updated successfully")

    async def reset_password(self, email: str, new_password: str) -> AuthResult:
        if not self._settings.supabase_service_role_key:
            log.error("supabase_reset_unavailable", reason="service_role_key_missing")
            return AuthResult.failure(
                "Password reset is not available right now. Please try again later."
            )

        # Resolve the user id through a recovery link; the link itself is unused
        response = await self._call(
            "POST",
            "/admin/generate_link",
            headers=self._admin_headers(),
            payload={"type": "recovery", "email": email},
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code != 200:
            return AuthResult.failure(_error_message(response))

        body = response.json()
        user_id = (body.get("user") or body).get("id")
        if not user_id:
            return AuthResult.failure("Unable to reset password for this account.")

        response = await self._call(
            "PUT",
            f"/admin/users/{user_id}",
            headers=self._admin_headers(),
            payload={"password": new_password},
        )
        if response is None:
            return AuthResult.failure(UNREACHABLE)
        if response.status_code != 200:
            return AuthResult.failure(_error_message(response))

        log.info("supabase_password_reset", email=mask_email(email))
        self._events.emit(AuthEvent.USER_UPDATED, None)
        return AuthResult.success(message="Password updated successfully")

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        return self._events.subscribe(listener)
