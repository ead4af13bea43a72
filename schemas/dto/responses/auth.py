"""
Response DTOs for authentication endpoints.

FlowStepResponse: the active step and its (non-secret) data
RateLimitResponse: limiter status shown next to the login form
FlowResponse: every /auth/flow endpoint
SessionResponse: session handed out on login / sign-up
PasswordStrengthResponse: POST /auth/password-strength
MeResponse: GET /auth/me
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from shared.datetime_utils import format_countdown


class FlowStepResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str = ""


class RateLimitResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attempts: int
    is_limited: bool
    retry_after_seconds: int = 0
    message: Optional[str] = None


class SessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user_id: str
    email: str


class FlowResponse(BaseModel):
    """Response body for every /auth/flow endpoint.

    ``time_remaining_ms`` / ``countdown`` are display aids for the verify-code
    step; ``debug_code`` is only present when code exposure is enabled.
    """

    model_config = ConfigDict(populate_by_name=True)

    flow_id: str
    step: FlowStepResponse
    errors: dict[str, str]
    busy: bool
    closed: bool
    notice: Optional[str] = None
    rate_limit: RateLimitResponse
    time_remaining_ms: int = 0
    countdown: Optional[str] = None
    session: Optional[SessionResponse] = None
    is_admin: bool = False
    redirect_to: Optional[str] = None
    debug_code: Optional[str] = None

    @classmethod
    def from_result(cls, result) -> "FlowResponse":
        state = result.state
        rate = result.rate_limit
        session = result.session
        on_verify = state.step.value == "verify-code"
        return cls(
            flow_id=state.flow_id,
            step=FlowStepResponse(name=state.step.value, email=state.current.email),
            errors=dict(state.errors),
            busy=state.busy,
            closed=state.closed,
            notice=state.notice,
            rate_limit=RateLimitResponse(
                attempts=rate.attempt_count,
                is_limited=rate.is_limited,
                retry_after_seconds=rate.retry_after_seconds,
                message=rate.message,
            ),
            time_remaining_ms=result.time_remaining_ms,
            countdown=format_countdown(result.time_remaining_ms) if on_verify else None,
            session=(
                SessionResponse(
                    access_token=session.access_token,
                    refresh_token=session.refresh_token,
                    expires_in=session.expires_in,
                    user_id=session.user_id,
                    email=session.email,
                )
                if session is not None
                else None
            ),
            is_admin=result.is_admin,
            redirect_to=result.redirect_to,
            debug_code=result.debug_code,
        )


class PasswordStrengthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: int
    label: str
    feedback: list[str]
    is_valid: bool


class MeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    email: str
    is_admin: bool
