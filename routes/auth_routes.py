"""
Authentication routes.

/auth/flow/...          the step machine (login, registration, code-based reset)
/auth/password-strength live strength meter for password fields
/auth/me                identity behind a bearer token
/auth/password          change the signed-in user's password
/auth/logout            end the backend session
/auth/recover           the backend's own recovery email

Flow endpoints always answer with FlowResponse; step-level problems are in
its ``errors`` map. A locked-out login answers 429 with
``details.retry_after_seconds``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import (
    client_key,
    get_access_token,
    get_auth_backend,
    get_auth_flow_service,
    get_current_user,
)
from errors import AuthenticationError, ServiceUnavailableError, ValidationError
from infrastructure.auth_backend.protocol import AuthBackend
from schemas.dto.requests.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    NavigateRequest,
    PasswordStrengthRequest,
    RecoverRequest,
    RegisterEmailRequest,
    RegisterPasswordRequest,
    ResetPasswordRequest,
    VerifyCodeRequest,
)
from schemas.dto.responses.auth import FlowResponse, MeResponse, PasswordStrengthResponse
from schemas.dto.responses.common import MessageResponse
from services.auth.flow_service import AuthFlowService
from services.auth.identity import CurrentUser
from shared.logging import get_logger
from shared.password_strength import evaluate_password

log = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/flow", response_model=FlowResponse, status_code=201)
async def start_flow(
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.start(key))


@router.get("/flow/{flow_id}", response_model=FlowResponse)
async def get_flow(
    flow_id: str,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.get(flow_id, key))


@router.post("/flow/{flow_id}/navigate", response_model=FlowResponse)
async def navigate(
    flow_id: str,
    body: NavigateRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.navigate(flow_id, key, body.step))


@router.post("/flow/{flow_id}/login", response_model=FlowResponse)
async def login(
    flow_id: str,
    body: LoginRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    result = await service.login(flow_id, key, body.email, body.password)
    return FlowResponse.from_result(result)


@router.post("/flow/{flow_id}/register/email", response_model=FlowResponse)
async def register_email(
    flow_id: str,
    body: RegisterEmailRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.register_email(flow_id, key, body.email))


@router.post("/flow/{flow_id}/register/password", response_model=FlowResponse)
async def register_password(
    flow_id: str,
    body: RegisterPasswordRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    result = await service.register_password(
        flow_id, key, body.password, body.confirm_password
    )
    return FlowResponse.from_result(result)


@router.post("/flow/{flow_id}/forgot-password", response_model=FlowResponse)
async def forgot_password(
    flow_id: str,
    body: ForgotPasswordRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.forgot_password(flow_id, key, body.email))


@router.post("/flow/{flow_id}/verify-code", response_model=FlowResponse)
async def verify_code(
    flow_id: str,
    body: VerifyCodeRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.verify_code(flow_id, key, body.code))


@router.post("/flow/{flow_id}/resend-code", response_model=FlowResponse)
async def resend_code(
    flow_id: str,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.resend_code(flow_id, key))


@router.post("/flow/{flow_id}/reset-password", response_model=FlowResponse)
async def reset_password(
    flow_id: str,
    body: ResetPasswordRequest,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    result = await service.reset_password(
        flow_id, key, body.new_password, body.confirm_password
    )
    return FlowResponse.from_result(result)


@router.post("/flow/{flow_id}/close", response_model=FlowResponse)
async def close_flow(
    flow_id: str,
    key: str = Depends(client_key),
    service: AuthFlowService = Depends(get_auth_flow_service),
) -> FlowResponse:
    return FlowResponse.from_result(await service.close(flow_id, key))


@router.post("/password-strength", response_model=PasswordStrengthResponse)
async def password_strength(body: PasswordStrengthRequest) -> PasswordStrengthResponse:
    strength = evaluate_password(body.password)
    return PasswordStrengthResponse(
        score=strength.score,
        label=strength.label,
        feedback=list(strength.feedback),
        is_valid=strength.is_valid,
    )


@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser = Depends(get_current_user)) -> MeResponse:
    return MeResponse(user_id=user.user_id, email=user.email, is_admin=user.is_admin)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_access_token),
    backend: AuthBackend = Depends(get_auth_backend),
) -> MessageResponse:
    result = await backend.sign_out(token)
    if not result.ok:
        raise AuthenticationError(result.message or "Unable to sign out")
    return MessageResponse(success=True, message="You have been signed out.")


@router.post("/recover", response_model=MessageResponse)
async def recover(
    body: RecoverRequest,
    backend: AuthBackend = Depends(get_auth_backend),
) -> MessageResponse:
    result = await backend.request_password_reset(body.email.strip())
    if not result.ok:
        raise ServiceUnavailableError(
            result.message or "Unable to send password reset instructions."
        )
    return MessageResponse(
        success=True,
        message=result.message
        or "If an account exists for this email, password reset instructions have been sent.",
    )


@router.post("/password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    token: str = Depends(get_access_token),
    backend: AuthBackend = Depends(get_auth_backend),
) -> MessageResponse:
    if not evaluate_password(body.new_password).is_valid:
        raise ValidationError(
            "Password does not meet requirements", field="new_password"
        )
    if body.new_password != body.confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")

    result = await backend.update_password(token, body.new_password)
    if not result.ok:
        raise ValidationError(
            result.message or "Failed to update password. Please try again."
        )
    log.info("password_changed", user_id=user.user_id)
    return MessageResponse(success=True, message="Your password has been updated.")
