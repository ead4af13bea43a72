"""
Request DTOs for authentication endpoints.

Fields default to empty strings: the flow service reports missing values as
inline step errors ("Email is required"), not as 422 responses.

NavigateRequest: POST /auth/flow/{id}/navigate
LoginRequest: POST /auth/flow/{id}/login
RegisterEmailRequest: POST /auth/flow/{id}/register/email
RegisterPasswordRequest: POST /auth/flow/{id}/register/password
ForgotPasswordRequest: POST /auth/flow/{id}/forgot-password
VerifyCodeRequest: POST /auth/flow/{id}/verify-code
ResetPasswordRequest: POST /auth/flow/{id}/reset-password
ChangePasswordRequest: POST /auth/password
PasswordStrengthRequest: POST /auth/password-strength
RecoverRequest: POST /auth/recover
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from schemas.models.auth_flow import AuthStep


class NavigateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    step: AuthStep


class LoginRequest(BaseModel):
    """Request body for the login step."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    password: str = ""


class RegisterEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = ""


class RegisterPasswordRequest(BaseModel):
    """Request body for the second registration step.

    The email was accepted on the previous step and lives in the flow.
    """

    model_config = ConfigDict(populate_by_name=True)

    password: str = ""
    confirm_password: str = ""


class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = ""


class VerifyCodeRequest(BaseModel):
    """``code`` is the 6-digit code sent to the user's email address."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = ""


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = ""
    confirm_password: str = ""


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = ""
    confirm_password: str = ""


class PasswordStrengthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = ""


class RecoverRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
