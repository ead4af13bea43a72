"""KeyValueStore protocol. The rate limiter, flow sessions and onboarding
markers depend on this, not on Redis or process memory directly.

Values are strings; callers serialise structured data as JSON. A `ttl_seconds`
on `set` schedules the key's removal.
"""

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(
        self, key: str, value: str, ttl_seconds: Optional[int] = None
    ) -> None: ...

    async def delete(self, *keys: str) -> None: ...
