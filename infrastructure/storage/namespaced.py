"""Key prefixing over any KeyValueStore.

Gives each client (rate-limit counters) or user (onboarding data) its own
view of the store, so callers can use the short browser-era key names
(`auth_attempts`, `dashboardData`, ...) unchanged.
"""

from __future__ import annotations

from typing import Optional

from infrastructure.storage.protocol import KeyValueStore


class NamespacedStore:
    def __init__(self, store: KeyValueStore, namespace: str) -> None:
        self._store = store
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self._store.get(self._key(key))

    async def set(
        self, key: str, value: str, ttl_seconds: Optional[int] = None
    ) -> None:
        await self._store.set(self._key(key), value, ttl_seconds)

    async def delete(self, *keys: str) -> None:
        await self._store.delete(*(self._key(k) for k in keys))
