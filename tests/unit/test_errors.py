"""Unit tests for the AppError hierarchy and the global error handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import (
    AppError,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    IncorrectCodeError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
    VerificationExhaustedError,
    VerificationExpiredError,
    VerificationMissingError,
    register_error_handlers,
)


class TestAppErrorSubclasses:
    @pytest.mark.parametrize(
        "cls, status, code",
        [
            (ValidationError, 400, "validation_error"),
            (AuthenticationError, 401, "authentication_error"),
            (ForbiddenError, 403, "forbidden"),
            (NotFoundError, 404, "not_found"),
            (ConflictError, 409, "conflict"),
            (RateLimitError, 429, "rate_limit_exceeded"),
            (ServiceUnavailableError, 503, "service_unavailable"),
            (VerificationMissingError, 400, "verification_missing"),
            (VerificationExpiredError, 400, "verification_expired"),
            (VerificationExhaustedError, 400, "verification_exhausted"),
        ],
        ids=lambda v: v.__name__ if isinstance(v, type) else str(v),
    )
    def test_status_and_code(self, cls, status, code):
        e = cls("message")
        assert isinstance(e, AppError)
        assert e.status_code == status
        assert e.error_code == code
        assert e.message == "message"

    def test_incorrect_code_carries_remaining(self):
        e = IncorrectCodeError("Incorrect code. 2 attempts remaining.", remaining=2)
        assert e.status_code == 400
        assert e.remaining == 2
        assert e.field == "verification_code"
        assert e.details == {"remaining": 2}


class TestAppErrorToDict:
    def test_basic(self):
        e = NotFoundError("flow not found")
        assert e.to_dict() == {"error": "flow not found", "code": "not_found"}

    @pytest.mark.parametrize(
        "kwargs, key, value",
        [
            ({"field": "email"}, "field", "email"),
            ({"details": {"retry_after_seconds": 900}}, "details", {"retry_after_seconds": 900}),
        ],
        ids=["with_field", "with_details"],
    )
    def test_optional_key_present(self, kwargs, key, value):
        e = ValidationError("invalid", **kwargs)
        assert e.to_dict()[key] == value

    def test_no_optional_keys_when_absent(self):
        d = NotFoundError("missing").to_dict()
        assert "field" not in d
        assert "details" not in d


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    async def boom():
        raise exc

    return app


class TestErrorHandlers:
    def test_app_error_rendered_as_json(self):
        app = _app_raising(RateLimitError("Please wait 15 minutes before trying again."))
        with TestClient(app) as client:
            resp = client.get("/boom")
        assert resp.status_code == 429
        assert resp.json() == {
            "error": "Please wait 15 minutes before trying again.",
            "code": "rate_limit_exceeded",
        }

    def test_unhandled_error_is_generic_500(self):
        app = _app_raising(RuntimeError("secret internals"))
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/boom")
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_error"
        assert "secret internals" not in resp.text
