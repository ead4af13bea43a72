"""
Pure transitions for the authentication step machine.

``transition(state, event)`` never mutates its input and performs no I/O;
the flow service decides *which* event happened (after validation, backend
calls, code checks) and this module decides *what the flow looks like next*.

Every transition into a step builds that step from scratch, so form data
from the step being left is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from schemas.models.auth_flow import (
    STEP_TYPES,
    AuthFlowState,
    AuthStep,
    ForgotPasswordStep,
    RegisterPasswordStep,
    ResetPasswordStep,
    StepState,
    VerificationState,
    VerifyCodeStep,
)


@dataclass(frozen=True)
class Navigate:
    """Explicit user navigation (links such as "Forgot password?")."""

    target: AuthStep
    email: str = ""


@dataclass(frozen=True)
class EmailAccepted:
    email: str


@dataclass(frozen=True)
class CodeIssued:
    verification: VerificationState


@dataclass(frozen=True)
class CodeVerified:
    email: str


@dataclass(frozen=True)
class VerificationLost:
    """The code expired or ran out of attempts; back to requesting one."""

    message: str


@dataclass(frozen=True)
class Failed:
    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Completed:
    notice: Optional[str] = None


@dataclass(frozen=True)
class Close:
    pass


FlowEvent = Union[
    Navigate,
    EmailAccepted,
    CodeIssued,
    CodeVerified,
    VerificationLost,
    Failed,
    Completed,
    Close,
]


def blank_step(target: AuthStep, email: str = "") -> StepState:
    return STEP_TYPES[AuthStep(target)](email=email)


def transition(state: AuthFlowState, event: FlowEvent) -> AuthFlowState:
    if isinstance(event, Navigate):
        return state.model_copy(
            update={
                "current": blank_step(event.target, event.email),
                "errors": {},
                "notice": None,
                "closed": False,
            }
        )

    if isinstance(event, EmailAccepted):
        return state.model_copy(
            update={
                "current": RegisterPasswordStep(email=event.email),
                "errors": {},
            }
        )

    if isinstance(event, CodeIssued):
        return state.model_copy(
            update={
                "current": VerifyCodeStep(email=event.verification.email),
                "verification": event.verification,
                "errors": {},
            }
        )

    if isinstance(event, CodeVerified):
        return state.model_copy(
            update={
                "current": ResetPasswordStep(email=event.email),
                "verification": None,
                "errors": {},
            }
        )

    if isinstance(event, VerificationLost):
        email = state.verification.email if state.verification else state.current.email
        return state.model_copy(
            update={
                "current": ForgotPasswordStep(email=email),
                "verification": None,
                "errors": {"verification_code": event.message},
            }
        )

    if isinstance(event, Failed):
        return state.model_copy(update={"errors": dict(event.errors)})

    if isinstance(event, Completed):
        return AuthFlowState(flow_id=state.flow_id, closed=True, notice=event.notice)

    if isinstance(event, Close):
        return AuthFlowState(flow_id=state.flow_id, closed=True)

    raise TypeError(f"Unknown flow event: {event!r}")
