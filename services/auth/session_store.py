"""Persistence of AuthFlowState between requests (`flow:{id}` keys)."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from errors import NotFoundError
from infrastructure.storage.protocol import KeyValueStore
from schemas.models.auth_flow import AuthFlowState
from shared.generators import generate_flow_id
from shared.logging import get_logger

log = get_logger(__name__)

FLOW_NOT_FOUND = "Sign-in session not found or expired. Please start again."


class FlowSessionStore:
    def __init__(self, store: KeyValueStore, ttl_seconds: int = 1800) -> None:
        self._store = store
        self._ttl = ttl_seconds

    @staticmethod
    def _key(flow_id: str) -> str:
        return f"flow:{flow_id}"

    async def create(self) -> AuthFlowState:
        state = AuthFlowState(flow_id=generate_flow_id())
        await self.save(state)
        return state

    async def load(self, flow_id: str) -> AuthFlowState:
        raw = await self._store.get(self._key(flow_id))
        if raw is None:
            raise NotFoundError(FLOW_NOT_FOUND)
        try:
            return AuthFlowState.model_validate_json(raw)
        except PydanticValidationError as e:
            log.error("auth_flow_state_corrupt", flow_id=flow_id, error=str(e))
            await self._store.delete(self._key(flow_id))
            raise NotFoundError(FLOW_NOT_FOUND) from e

    async def save(self, state: AuthFlowState) -> None:
        await self._store.set(
            self._key(state.flow_id), state.model_dump_json(), ttl_seconds=self._ttl
        )

    async def delete(self, flow_id: str) -> None:
        await self._store.delete(self._key(flow_id))
