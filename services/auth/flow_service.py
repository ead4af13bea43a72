"""
AuthFlowService: the server side of the sign-in / sign-up / reset dialog.

Each public method loads the persisted flow, marks it busy for the length
of the call (a second submission meanwhile gets a 409), runs one handler,
and saves the result. Handlers validate input, talk to the backend, the
rate limiter and the code issuer, then express the outcome as a flow event
applied through ``steps.transition``.

Expected failures (bad input, rejected credentials, wrong codes) come back
as ``state.errors`` on a normal response. Only throttling (429), concurrent
submissions and submissions on the wrong step (409), and unknown flows (404)
are raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from config import AuthFlowSettings
from errors import (
    ConflictError,
    IncorrectCodeError,
    VerificationExhaustedError,
    VerificationExpiredError,
    VerificationMissingError,
)
from infrastructure.auth_backend.protocol import AuthBackend, AuthSession
from infrastructure.email.protocol import EmailProvider
from infrastructure.storage.namespaced import NamespacedStore
from infrastructure.storage.protocol import KeyValueStore
from schemas.models.auth_flow import AuthFlowState, AuthStep, LoginStep, RateLimitState
from services.auth.rate_limiter import LoginRateLimiter
from services.auth.session_store import FlowSessionStore
from services.auth.steps import (
    Close,
    CodeIssued,
    CodeVerified,
    Completed,
    EmailAccepted,
    Failed,
    FlowEvent,
    Navigate,
    VerificationLost,
    transition,
)
from services.auth.verification import EXPIRED_MESSAGE, VerificationCodeIssuer
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, mask_email
from shared.password_strength import evaluate_password
from shared.validators import validate_email, verification_code_error

log = get_logger(__name__)

LOGIN_MIN_PASSWORD_LENGTH = 6

LOGIN_NOTICE = "You have been logged in successfully."
RESET_NOTICE = (
    "Your password has been changed. You can now log in with your new password."
)
SIGNUP_NOTICE = "Account created successfully! Welcome to XByzeth."
SEND_CODE_FAILED = "Failed to send verification code. Please try again."
RESEND_CODE_FAILED = "Failed to send new code. Please try again."
UNVERIFIED_RESET = "Please verify your email before resetting your password."
FLOW_CLOSED = "This sign-in flow has been closed. Please start a new one."
FLOW_BUSY = "A request for this sign-in flow is already in progress."


@dataclass
class FlowResult:
    state: AuthFlowState
    rate_limit: RateLimitState
    time_remaining_ms: int = 0
    session: Optional[AuthSession] = None
    is_admin: bool = False
    redirect_to: Optional[str] = None
    debug_code: Optional[str] = None


@dataclass
class _Outcome:
    state: AuthFlowState
    session: Optional[AuthSession] = None
    debug_code: Optional[str] = None


def _email_error(email: str) -> Optional[str]:
    if not email:
        return "Email is required"
    if not validate_email(email):
        return "Please enter a valid email address"
    return None


def _new_password_errors(
    password: str, confirm_password: str, field: str
) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not evaluate_password(password).is_valid:
        errors[field] = "Password does not meet requirements"
    if not confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"
    return errors


class AuthFlowService:
    def __init__(
        self,
        backend: AuthBackend,
        sessions: FlowSessionStore,
        store: KeyValueStore,
        notifier: EmailProvider,
        settings: AuthFlowSettings,
        is_admin_email: Callable[[str], bool] = lambda email: False,
        clock: Clock = utc_now,
    ) -> None:
        self._backend = backend
        self._sessions = sessions
        self._store = store
        self._notifier = notifier
        self._settings = settings
        self._is_admin_email = is_admin_email
        self._clock = clock

    # ── Collaborators ────────────────────────────────────────────────────────

    def _limiter(self, client_key: str) -> LoginRateLimiter:
        return LoginRateLimiter(
            NamespacedStore(self._store, f"ratelimit:{client_key}"),
            clock=self._clock,
            max_attempts=self._settings.max_login_attempts,
            lockout_seconds=self._settings.login_lockout_seconds,
        )

    def _issuer(self, state: AuthFlowState) -> VerificationCodeIssuer:
        return VerificationCodeIssuer(
            self._notifier,
            clock=self._clock,
            expiry_seconds=self._settings.verification_code_ttl_seconds,
            max_attempts=self._settings.max_code_attempts,
            state=state.verification,
        )

    def _exposed(self, code: str) -> Optional[str]:
        return code if self._settings.expose_verification_code else None

    # ── Plumbing ─────────────────────────────────────────────────────────────

    async def _result(
        self, client_key: str, outcome: _Outcome
    ) -> FlowResult:
        state = outcome.state
        remaining = 0
        if state.step == AuthStep.VERIFY_CODE:
            remaining = self._issuer(state).time_remaining_ms()

        result = FlowResult(
            state=state,
            rate_limit=await self._limiter(client_key).check_on_load(),
            time_remaining_ms=remaining,
            session=outcome.session,
            debug_code=outcome.debug_code,
        )
        if outcome.session is not None:
            result.is_admin = self._is_admin_email(outcome.session.email)
            result.redirect_to = "/admin" if result.is_admin else "/dashboard"
        return result

    async def _run(
        self,
        flow_id: str,
        client_key: str,
        handler: Callable[[AuthFlowState], Awaitable[_Outcome]],
        *,
        allow_closed: bool = False,
    ) -> FlowResult:
        state = await self._sessions.load(flow_id)
        if state.busy:
            raise ConflictError(FLOW_BUSY)
        if state.closed and not allow_closed:
            raise ConflictError(FLOW_CLOSED)

        await self._sessions.save(state.model_copy(update={"busy": True}))
        outcome = _Outcome(state=state)
        try:
            outcome = await handler(state)
        finally:
            outcome.state = outcome.state.model_copy(update={"busy": False})
            await self._sessions.save(outcome.state)
        return await self._result(client_key, outcome)

    @staticmethod
    def _require_step(state: AuthFlowState, step: AuthStep) -> None:
        if state.step != step:
            raise ConflictError(
                f"This action is not available on the {state.step.value} step.",
                details={"current_step": state.step.value, "expected_step": step.value},
            )

    @staticmethod
    def _apply(state: AuthFlowState, event: FlowEvent) -> _Outcome:
        return _Outcome(state=transition(state, event))

    # ── Queries ──────────────────────────────────────────────────────────────

    async def start(self, client_key: str) -> FlowResult:
        state = await self._sessions.create()
        log.info("auth_flow_started", flow_id=state.flow_id)
        return await self._result(client_key, _Outcome(state=state))

    async def get(self, flow_id: str, client_key: str) -> FlowResult:
        """Current state; an expired code on verify-code falls back here too."""
        state = await self._sessions.load(flow_id)
        if (
            state.step == AuthStep.VERIFY_CODE
            and state.verification is not None
            and not state.busy
            and self._issuer(state).time_remaining_ms() == 0
        ):
            state = transition(state, VerificationLost(EXPIRED_MESSAGE))
            await self._sessions.save(state)
            log.info("verification_code_expired_on_poll", flow_id=flow_id)
        return await self._result(client_key, _Outcome(state=state))

    # ── Commands ─────────────────────────────────────────────────────────────

    async def navigate(
        self, flow_id: str, client_key: str, target: AuthStep
    ) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            email = ""
            if target == AuthStep.VERIFY_CODE and state.verification is not None:
                email = state.verification.email
            return self._apply(state, Navigate(target=target, email=email))

        return await self._run(flow_id, client_key, handler, allow_closed=True)

    async def close(self, flow_id: str, client_key: str) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            return self._apply(state, Close())

        return await self._run(flow_id, client_key, handler, allow_closed=True)

    async def login(
        self, flow_id: str, client_key: str, email: str, password: str
    ) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.LOGIN)
            limiter = self._limiter(client_key)
            await limiter.ensure_allowed()

            email_clean = email.strip()
            state = state.model_copy(update={"current": LoginStep(email=email_clean)})

            errors: dict[str, str] = {}
            email_error = _email_error(email_clean)
            if email_error:
                errors["email"] = email_error
            if not password:
                errors["password"] = "Password is required"
            elif len(password) < LOGIN_MIN_PASSWORD_LENGTH:
                errors["password"] = "Password must be at least 6 characters"
            if errors:
                return self._apply(state, Failed(errors))

            result = await self._backend.sign_in(email_clean, password)
            if not result.ok:
                rate = await limiter.record_failed_attempt()
                log.info(
                    "login_failed",
                    flow_id=flow_id,
                    email=mask_email(email_clean),
                    attempts=rate.attempt_count,
                )
                message = result.message or "An unexpected error occurred. Please try again."
                return self._apply(state, Failed({"general": message}))

            await limiter.clear_on_success()
            log.info("login_succeeded", flow_id=flow_id, email=mask_email(email_clean))
            outcome = self._apply(state, Completed(LOGIN_NOTICE))
            outcome.session = result.session
            return outcome

        return await self._run(flow_id, client_key, handler)

    async def register_email(self, flow_id: str, client_key: str, email: str) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.REGISTER_EMAIL)
            email_clean = email.strip()
            error = _email_error(email_clean)
            if error:
                state = state.model_copy(
                    update={"current": state.current.model_copy(update={"email": email_clean})}
                )
                return self._apply(state, Failed({"email": error}))
            return self._apply(state, EmailAccepted(email_clean))

        return await self._run(flow_id, client_key, handler)

    async def register_password(
        self, flow_id: str, client_key: str, password: str, confirm_password: str
    ) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.REGISTER_PASSWORD)
            email = state.current.email
            if not email:
                return self._apply(state, Failed({"email": "Email is required"}))

            errors = _new_password_errors(password, confirm_password, "password")
            if errors:
                return self._apply(state, Failed(errors))

            result = await self._backend.sign_up(email, password)
            if not result.ok:
                log.info("sign_up_rejected", flow_id=flow_id, email=mask_email(email))
                message = result.message or "Failed to create account. Please try again."
                return self._apply(state, Failed({"general": message}))

            log.info("sign_up_succeeded", flow_id=flow_id, email=mask_email(email))
            outcome = self._apply(state, Completed(result.message or SIGNUP_NOTICE))
            outcome.session = result.session
            return outcome

        return await self._run(flow_id, client_key, handler)

    async def forgot_password(self, flow_id: str, client_key: str, email: str) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.FORGOT_PASSWORD)
            email_clean = email.strip()
            state = state.model_copy(
                update={"current": state.current.model_copy(update={"email": email_clean})}
            )
            error = _email_error(email_clean)
            if error:
                return self._apply(state, Failed({"email": error}))

            issued = await self._issuer(state).issue(email_clean)
            if not issued.delivered:
                return self._apply(state, Failed({"general": SEND_CODE_FAILED}))

            outcome = self._apply(state, CodeIssued(issued.verification))
            outcome.debug_code = self._exposed(issued.code)
            return outcome

        return await self._run(flow_id, client_key, handler)

    async def verify_code(self, flow_id: str, client_key: str, code: str) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.VERIFY_CODE)
            code_clean = code.strip()
            format_error = verification_code_error(code_clean)
            if format_error:
                return self._apply(state, Failed({"verification_code": format_error}))

            issuer = self._issuer(state)
            try:
                email = issuer.verify(code_clean)
            except IncorrectCodeError as e:
                state = state.model_copy(update={"verification": issuer.state})
                return self._apply(state, Failed({"verification_code": e.message}))
            except (
                VerificationExpiredError,
                VerificationExhaustedError,
                VerificationMissingError,
            ) as e:
                return self._apply(state, VerificationLost(e.message))
            return self._apply(state, CodeVerified(email))

        return await self._run(flow_id, client_key, handler)

    async def resend_code(self, flow_id: str, client_key: str) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.VERIFY_CODE)
            try:
                issued = await self._issuer(state).reissue()
            except VerificationMissingError as e:
                return self._apply(state, VerificationLost(e.message))
            if not issued.delivered:
                return self._apply(state, Failed({"general": RESEND_CODE_FAILED}))

            outcome = self._apply(state, CodeIssued(issued.verification))
            outcome.debug_code = self._exposed(issued.code)
            return outcome

        return await self._run(flow_id, client_key, handler)

    async def reset_password(
        self,
        flow_id: str,
        client_key: str,
        new_password: str,
        confirm_password: str,
    ) -> FlowResult:
        async def handler(state: AuthFlowState) -> _Outcome:
            self._require_step(state, AuthStep.RESET_PASSWORD)
            email = state.current.email
            if not email:
                return self._apply(state, VerificationLost(UNVERIFIED_RESET))

            errors = _new_password_errors(new_password, confirm_password, "new_password")
            if errors:
                return self._apply(state, Failed(errors))

            result = await self._backend.reset_password(email, new_password)
            if not result.ok:
                message = result.message or "Failed to reset password. Please try again."
                return self._apply(state, Failed({"general": message}))

            log.info("password_reset_completed", flow_id=flow_id, email=mask_email(email))
            return self._apply(state, Completed(RESET_NOTICE))

        return await self._run(flow_id, client_key, handler)
