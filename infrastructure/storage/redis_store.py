"""Redis-backed KeyValueStore.

Errors propagate: unlike a cache, losing a rate-limit counter or a flow
session silently would change behaviour, so callers see the failure.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as aioredis


class RedisKeyValueStore:
    def __init__(self, redis_client: aioredis.Redis, prefix: str = "portal") -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(self._key(key))

    async def set(
        self, key: str, value: str, ttl_seconds: Optional[int] = None
    ) -> None:
        if ttl_seconds is None:
            await self._redis.set(self._key(key), value)
        else:
            await self._redis.setex(self._key(key), ttl_seconds, value)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._redis.delete(*(self._key(k) for k in keys))
