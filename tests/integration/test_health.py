"""Integration tests for GET /health with MongoDB and Redis mocked out."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError
from redis.exceptions import ConnectionError as RedisConnectionError

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _build_test_app(mongo_ok: bool = True, redis_state: str = "ok") -> FastAPI:
    """redis_state is one of "ok", "down" or "absent"."""
    mock_db = MagicMock()
    mock_db.client.admin.command = (
        AsyncMock(return_value={"ok": 1})
        if mongo_ok
        else AsyncMock(side_effect=ServerSelectionTimeoutError("connection refused"))
    )

    mock_redis = None
    if redis_state != "absent":
        mock_redis = MagicMock()
        mock_redis.ping = (
            AsyncMock(return_value=True)
            if redis_state == "ok"
            else AsyncMock(side_effect=RedisConnectionError("redis down"))
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = mock_db
        app.state.redis = mock_redis
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


@pytest.mark.parametrize(
    "mongo_ok, redis_state, status_code, overall, checks",
    [
        (True, "ok", 200, "healthy", {"mongodb": "ok", "redis": "ok"}),
        (False, "ok", 503, "unhealthy", {"mongodb": "error", "redis": "ok"}),
        (True, "down", 200, "degraded", {"mongodb": "ok", "redis": "error"}),
        (True, "absent", 200, "degraded", {"mongodb": "ok", "redis": "not_configured"}),
        (False, "absent", 503, "unhealthy", {"mongodb": "error", "redis": "not_configured"}),
    ],
    ids=["healthy", "mongo_down", "redis_down", "memory_store", "mongo_down_memory_store"],
)
def test_health(mongo_ok, redis_state, status_code, overall, checks):
    with TestClient(_build_test_app(mongo_ok, redis_state)) as client:
        resp = client.get("/health")
    assert resp.status_code == status_code
    assert resp.json() == {"status": overall, "checks": checks}
