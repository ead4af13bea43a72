"""In-process KeyValueStore.

Used when Redis is not configured and as the test double. An expired key
is dropped when it is read, and writes sweep every expired key at most
once per SWEEP_INTERVAL_SECONDS so keys nobody reads again do not pile up.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

SWEEP_INTERVAL_SECONDS = 60.0


class InMemoryKeyValueStore:
    def __init__(self, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._data: dict[str, str] = {}
        self._expiry: dict[str, float] = {}
        self._monotonic = monotonic
        self._last_sweep = monotonic()

    def _expired(self, key: str) -> bool:
        deadline = self._expiry.get(key)
        return deadline is not None and self._monotonic() >= deadline

    def _drop(self, key: str) -> None:
        self._data.pop(key, None)
        self._expiry.pop(key, None)

    def _sweep(self) -> None:
        now = self._monotonic()
        if now - self._last_sweep < SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now
        for key in [k for k, deadline in self._expiry.items() if now >= deadline]:
            self._drop(key)

    async def get(self, key: str) -> Optional[str]:
        if self._expired(key):
            self._drop(key)
            return None
        return self._data.get(key)

    async def set(
        self, key: str, value: str, ttl_seconds: Optional[int] = None
    ) -> None:
        self._sweep()
        self._data[key] = value
        if ttl_seconds is None:
            self._expiry.pop(key, None)
        else:
            self._expiry[key] = self._monotonic() + ttl_seconds

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._drop(key)

    def __len__(self) -> int:
        return sum(1 for key in self._data if not self._expired(key))
