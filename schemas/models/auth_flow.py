"""
Authentication flow state.

AuthFlowState is what the step machine persists between requests under
`flow:{flow_id}` in the key-value store. The active step is a tagged union
(discriminated on `step`); each variant carries only the data its screen
needs. Passwords are never part of the persisted state.

VerificationState holds the SHA-256 digest of the issued code, never the
code itself.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class AuthStep(str, Enum):
    LOGIN = "login"
    REGISTER_EMAIL = "register-email"
    REGISTER_PASSWORD = "register-password"
    FORGOT_PASSWORD = "forgot-password"
    VERIFY_CODE = "verify-code"
    RESET_PASSWORD = "reset-password"


class LoginStep(BaseModel):
    step: Literal["login"] = "login"
    email: str = ""


class RegisterEmailStep(BaseModel):
    step: Literal["register-email"] = "register-email"
    email: str = ""


class RegisterPasswordStep(BaseModel):
    """Second registration screen; `email` was accepted on the first one."""

    step: Literal["register-password"] = "register-password"
    email: str = ""


class ForgotPasswordStep(BaseModel):
    step: Literal["forgot-password"] = "forgot-password"
    email: str = ""


class VerifyCodeStep(BaseModel):
    step: Literal["verify-code"] = "verify-code"
    email: str = ""


class ResetPasswordStep(BaseModel):
    """`email` is the address whose code was verified; empty means unverified."""

    step: Literal["reset-password"] = "reset-password"
    email: str = ""


StepState = Union[
    LoginStep,
    RegisterEmailStep,
    RegisterPasswordStep,
    ForgotPasswordStep,
    VerifyCodeStep,
    ResetPasswordStep,
]

STEP_TYPES: dict[AuthStep, type[BaseModel]] = {
    AuthStep.LOGIN: LoginStep,
    AuthStep.REGISTER_EMAIL: RegisterEmailStep,
    AuthStep.REGISTER_PASSWORD: RegisterPasswordStep,
    AuthStep.FORGOT_PASSWORD: ForgotPasswordStep,
    AuthStep.VERIFY_CODE: VerifyCodeStep,
    AuthStep.RESET_PASSWORD: ResetPasswordStep,
}


class VerificationState(BaseModel):
    email: str
    code_hash: str
    expires_at: datetime
    attempts: int = Field(default=0, ge=0)


class RateLimitState(BaseModel):
    attempt_count: int = 0
    last_attempt_at: Optional[datetime] = None
    is_limited: bool = False
    retry_after_seconds: int = 0

    @property
    def wait_minutes(self) -> int:
        # Round up: 61 seconds left is "2 minutes"
        return -(-self.retry_after_seconds // 60)

    @property
    def message(self) -> Optional[str]:
        if not self.is_limited:
            return None
        return f"Please wait {self.wait_minutes} minutes before trying again."


class AuthFlowState(BaseModel):
    flow_id: str
    current: StepState = Field(default_factory=LoginStep, discriminator="step")
    errors: dict[str, str] = Field(default_factory=dict)
    verification: Optional[VerificationState] = None
    busy: bool = False
    closed: bool = False
    notice: Optional[str] = None

    @property
    def step(self) -> AuthStep:
        return AuthStep(self.current.step)
