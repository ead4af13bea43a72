"""Unit tests for request and response DTOs."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from infrastructure.auth_backend.protocol import AuthSession
from schemas.dto.requests.auth import (
    LoginRequest,
    NavigateRequest,
    RecoverRequest,
    ResetPasswordRequest,
    VerifyCodeRequest,
)
from schemas.dto.requests.business import ApplicationRequest, SelectPackageRequest
from schemas.dto.requests.contact import ContactRequest
from schemas.dto.requests.dashboard import (
    TeamMemberRequest,
    UpdateBusinessRequest,
    UpdateStatusRequest,
)
from schemas.dto.responses.auth import FlowResponse, PasswordStrengthResponse
from schemas.dto.responses.business import PackageListResponse, PackageResponse
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.models.auth_flow import (
    AuthFlowState,
    AuthStep,
    RateLimitState,
    RegisterPasswordStep,
    VerifyCodeStep,
)
from services.auth.flow_service import FlowResult


# ── Auth requests ─────────────────────────────────────────────────────────────


class TestAuthRequests:
    def test_missing_fields_default_to_empty(self):
        # Blank fields become inline step errors, not 422s
        req = LoginRequest.model_validate({})
        assert req.email == ""
        assert req.password == ""
        assert ResetPasswordRequest().confirm_password == ""
        assert VerifyCodeRequest().code == ""

    def test_navigate_accepts_step_names(self):
        assert NavigateRequest(step="forgot-password").step == AuthStep.FORGOT_PASSWORD

    def test_navigate_rejects_unknown_step(self):
        with pytest.raises(ValidationError):
            NavigateRequest(step="dashboard")

    def test_recover_requires_email(self):
        with pytest.raises(ValidationError):
            RecoverRequest.model_validate({})


# ── Portal requests ───────────────────────────────────────────────────────────


class TestPortalRequests:
    def test_application_defaults(self):
        req = ApplicationRequest()
        assert req.business_state == "CA"
        assert req.members == []
        assert req.business_description is None

    def test_application_members_parsed(self):
        req = ApplicationRequest.model_validate(
            {"members": [{"name": "Sam", "email": "sam@acme.com"}]}
        )
        assert req.members[0].name == "Sam"
        assert req.members[0].position == ""

    def test_select_package_requires_name(self):
        with pytest.raises(ValidationError):
            SelectPackageRequest.model_validate({})

    def test_partial_update_dumps_only_present_fields(self):
        req = UpdateBusinessRequest(city="Oakland")
        assert req.model_dump(exclude_none=True) == {"city": "Oakland"}

    def test_team_member_status_validated(self):
        assert TeamMemberRequest(status="inactive").model_dump(mode="json", exclude_none=True) == {
            "status": "inactive"
        }
        with pytest.raises(ValidationError):
            TeamMemberRequest(status="retired")

    @pytest.mark.parametrize("status", ["approved", "in_review", "rejected"])
    def test_update_status_accepts_known(self, status):
        assert UpdateStatusRequest(status=status).status.value == status

    def test_update_status_rejects_unknown(self):
        with pytest.raises(ValidationError):
            UpdateStatusRequest(status="archived")

    @pytest.mark.parametrize(
        "overrides",
        [{"name": ""}, {"message": ""}, {"email": "a"}],
        ids=["no_name", "no_message", "short_email"],
    )
    def test_contact_required_fields(self, overrides):
        data = {"name": "Jane", "email": "jane@example.com", "message": "Hi"}
        data.update(overrides)
        with pytest.raises(ValidationError):
            ContactRequest(**data)

    def test_contact_optional_fields(self):
        req = ContactRequest(name="Jane", email="jane@example.com", message="Hi")
        assert req.service == ""
        assert req.business == ""


# ── FlowResponse ──────────────────────────────────────────────────────────────


class TestFlowResponse:
    def test_login_step(self):
        result = FlowResult(
            state=AuthFlowState(flow_id="f1", errors={"email": "Email is required"}),
            rate_limit=RateLimitState(attempt_count=2),
        )
        resp = FlowResponse.from_result(result)
        assert resp.flow_id == "f1"
        assert resp.step.name == "login"
        assert resp.errors == {"email": "Email is required"}
        assert resp.rate_limit.attempts == 2
        assert resp.rate_limit.message is None
        assert resp.countdown is None
        assert resp.session is None
        assert resp.debug_code is None

    def test_verify_step_has_countdown(self):
        result = FlowResult(
            state=AuthFlowState(flow_id="f1", current=VerifyCodeStep(email="a@b.co")),
            rate_limit=RateLimitState(),
            time_remaining_ms=245_000,
        )
        resp = FlowResponse.from_result(result)
        assert resp.step.email == "a@b.co"
        assert resp.time_remaining_ms == 245_000
        assert resp.countdown == "4:05"

    def test_countdown_only_on_verify_step(self):
        result = FlowResult(
            state=AuthFlowState(flow_id="f1", current=RegisterPasswordStep(email="a@b.co")),
            rate_limit=RateLimitState(),
            time_remaining_ms=10_000,
        )
        assert FlowResponse.from_result(result).countdown is None

    def test_limited_and_signed_in(self):
        result = FlowResult(
            state=AuthFlowState(flow_id="f1", closed=True, notice="Welcome"),
            rate_limit=RateLimitState(
                attempt_count=5, is_limited=True, retry_after_seconds=600
            ),
            session=AuthSession(access_token="tok", user_id="u1", email="a@b.co"),
            is_admin=True,
            redirect_to="/admin",
        )
        resp = FlowResponse.from_result(result)
        assert resp.rate_limit.message == "Please wait 10 minutes before trying again."
        assert resp.session.access_token == "tok"
        assert resp.session.refresh_token is None
        assert resp.redirect_to == "/admin"
        assert resp.closed is True

    def test_serialises_without_verification_state(self):
        state = AuthFlowState(flow_id="f1", current=VerifyCodeStep(email="a@b.co"))
        body = json.loads(
            FlowResponse.from_result(
                FlowResult(state=state, rate_limit=RateLimitState())
            ).model_dump_json()
        )
        assert "verification" not in body
        assert set(body["step"]) == {"name", "email"}


# ── Other responses ───────────────────────────────────────────────────────────


def test_error_response_matches_app_error_shape():
    body = ErrorResponse(error="Too many attempts", code="rate_limited", details={"attempts": 5})
    assert body.model_dump(exclude_none=True) == {
        "error": "Too many attempts",
        "code": "rate_limited",
        "details": {"attempts": 5},
    }


def test_message_response():
    assert MessageResponse(success=True).message is None


def test_password_strength_response():
    resp = PasswordStrengthResponse(score=5, label="Strong", feedback=[], is_valid=True)
    assert resp.model_dump()["label"] == "Strong"


def test_package_list_response():
    package = PackageResponse(
        name="Standard LLC",
        price=99,
        display_price="$99",
        description="Basic LLC formation",
        features=["State filing"],
        is_express=False,
    )
    resp = PackageListResponse(business_type="LLC", packages=[package])
    assert resp.packages[0].display_price == "$99"
