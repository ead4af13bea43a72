"""
Self-hosted AuthBackend over the `users` collection.

Passwords are argon2id hashes; sessions are JWTs shaped like the hosted
backend's so the rest of the app cannot tell the two apart. Rejection
messages mirror the hosted backend's wording.
"""

from __future__ import annotations

from typing import Callable, Optional

from pymongo.errors import DuplicateKeyError

from infrastructure.auth_backend.events import AuthEventBus
from infrastructure.auth_backend.protocol import (
    AuthEvent,
    AuthListener,
    AuthResult,
    AuthSession,
)
from infrastructure.auth_backend.tokens import TokenService
from infrastructure.email.protocol import EmailProvider
from errors import AuthenticationError
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from shared.crypto import hash_password, verify_password
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"
ALREADY_REGISTERED = "User already registered"
SIGNUP_CONFIRMATION = (
    "Account created successfully! Please check your email to verify your account."
)
RESET_REQUESTED = (
    "If an account exists for this email, password reset instructions have been sent."
)


class LocalAuthBackend:
    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        events: Optional[AuthEventBus] = None,
        email_provider: Optional[EmailProvider] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._events = events if events is not None else AuthEventBus()
        self._email = email_provider
        self._clock = clock

    def _session_for(self, user: UserDoc) -> AuthSession:
        user_id = str(user.id)
        return AuthSession(
            access_token=self._tokens.issue_access_token(user_id, user.email),
            refresh_token=self._tokens.issue_refresh_token(user_id, user.email),
            user_id=user_id,
            email=user.email,
            expires_in=self._tokens.access_ttl_seconds,
        )

    async def sign_in(self, email: str, password: str) -> AuthResult:
        user = await self._users.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            log.info("local_sign_in_rejected", email=mask_email(email))
            return AuthResult.failure(INVALID_CREDENTIALS)

        await self._users.touch_login(user.id, self._clock())
        session = self._session_for(user)
        self._events.emit(AuthEvent.SIGNED_IN, session)
        return AuthResult.success(session)

    async def sign_up(self, email: str, password: str) -> AuthResult:
        normalised = email.strip().lower()
        if await self._users.find_by_email(normalised) is not None:
            return AuthResult.failure(ALREADY_REGISTERED)

        now = self._clock()
        user = UserDoc(
            email=normalised,
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
        )
        try:
            await self._users.insert(user)
        except DuplicateKeyError:
            return AuthResult.failure(ALREADY_REGISTERED)

        log.info("local_user_registered", email=mask_email(normalised))
        if self._email is not None:
            await self._email.send_welcome_email(normalised)
        return AuthResult.success(message=SIGNUP_CONFIRMATION)

    async def sign_out(self, access_token: str) -> AuthResult:
        # Tokens are stateless; signing out only notifies listeners
        try:
            claims = self._tokens.verify(access_token)
        except AuthenticationError as e:
            return AuthResult.failure(e.message)
        self._events.emit(
            AuthEvent.SIGNED_OUT,
            AuthSession(
                access_token=access_token,
                user_id=claims["sub"],
                email=claims.get("email", ""),
            ),
        )
        return AuthResult.success()

    async def request_password_reset(self, email: str) -> AuthResult:
        # Same answer whether or not the account exists
        user = await self._users.find_by_email(email)
        log.info(
            "local_password_reset_requested",
            email=mask_email(email),
            account_exists=user is not None,
        )
        return AuthResult.success(message=RESET_REQUESTED)

    async def _set_password(self, user: UserDoc, new_password: str) -> AuthResult:
        updated = await self._users.set_password_hash(
            user.id, hash_password(new_password), self._clock()
        )
        if updated is None:
            return AuthResult.failure("User not found")
        self._events.emit(AuthEvent.USER_UPDATED, self._session_for(updated))
        return AuthResult.success(message="Password updated successfully")

    async def update_password(self, access_token: str, new_password: str) -> AuthResult:
        try:
            claims = self._tokens.verify(access_token)
        except AuthenticationError as e:
            return AuthResult.failure(e.message)

        user = await self._users.find_by_id(claims["sub"])
        if user is None:
            return AuthResult.failure("User not found")
        return await self._set_password(user, new_password)

    async def reset_password(self, email: str, new_password: str) -> AuthResult:
        user = await self._users.find_by_email(email)
        if user is None:
            log.warning("local_reset_unknown_account", email=mask_email(email))
            return AuthResult.failure("Unable to reset password for this account.")
        return await self._set_password(user, new_password)

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        return self._events.subscribe(listener)
