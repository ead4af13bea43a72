"""Access/refresh JWTs.

Tokens follow the Supabase GoTrue claim layout (HS256, ``aud="authenticated"``,
``sub`` = user id, ``email``) so one verifier serves both backends: the
local backend issues them, and Supabase-issued tokens verify against the
project's JWT secret.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import jwt

from config import JWTSettings
from errors import AuthenticationError
from shared.datetime_utils import Clock, utc_now

_ALGORITHM = "HS256"
_REFRESH_TTL_SECONDS = 30 * 24 * 3600


class TokenService:
    def __init__(self, settings: JWTSettings, clock: Clock = utc_now) -> None:
        if not settings.jwt_secret:
            raise RuntimeError("JWT_SECRET must be set to issue or verify tokens")
        self._settings = settings
        self._clock = clock

    @property
    def access_ttl_seconds(self) -> int:
        return self._settings.access_token_ttl_seconds

    def _claims(self, user_id: str, email: str, ttl_seconds: int) -> dict[str, Any]:
        now = self._clock()
        claims: dict[str, Any] = {
            "aud": self._settings.jwt_audience,
            "sub": str(user_id),
            "email": email,
            "role": "authenticated",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
        }
        if self._settings.jwt_issuer:
            claims["iss"] = self._settings.jwt_issuer
        return claims

    def issue_access_token(self, user_id: str, email: str) -> str:
        claims = self._claims(user_id, email, self._settings.access_token_ttl_seconds)
        return jwt.encode(claims, self._settings.jwt_secret, algorithm=_ALGORITHM)

    def issue_refresh_token(self, user_id: str, email: str) -> str:
        claims = self._claims(user_id, email, _REFRESH_TTL_SECONDS)
        claims["type"] = "refresh"
        return jwt.encode(claims, self._settings.jwt_secret, algorithm=_ALGORITHM)

    def verify(self, token: str, *, refresh: bool = False) -> dict[str, Any]:
        """Decode *token* and return its claims.

        Raises AuthenticationError for expired, malformed or mis-signed tokens,
        and when a refresh token is presented as an access token (or vice versa).
        """
        issuer: Optional[str] = self._settings.jwt_issuer or None
        try:
            claims = jwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[_ALGORITHM],
                audience=self._settings.jwt_audience,
                issuer=issuer,
                options={"require": ["exp", "sub"]},
                leeway=0,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session has expired. Please sign in again.")
        except jwt.PyJWTError:
            raise AuthenticationError("Invalid authentication token")

        is_refresh = claims.get("type") == "refresh"
        if is_refresh != refresh:
            raise AuthenticationError("Invalid authentication token")
        return claims
