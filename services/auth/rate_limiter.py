"""
Failed-login throttling over a KeyValueStore.

State lives under two keys, ``auth_attempts`` (count) and
``auth_last_attempt`` (epoch milliseconds), in a store namespaced per client.
Both keys carry the lockout window as their TTL, which is the scheduled
unlock; the limited/unlocked decision is still re-derived from the stored
timestamp on every read, so correctness never depends on the store expiring
keys on time.

Failures below the threshold age out the same way: once a full window has
passed since the last failure the count starts again from zero.
"""

from __future__ import annotations

import math
from datetime import timedelta
from typing import Optional

from errors import RateLimitError
from infrastructure.storage.protocol import KeyValueStore
from schemas.models.auth_flow import RateLimitState
from shared.datetime_utils import Clock, from_epoch_ms, to_epoch_ms, utc_now
from shared.logging import get_logger

log = get_logger(__name__)

ATTEMPTS_KEY = "auth_attempts"
LAST_ATTEMPT_KEY = "auth_last_attempt"


def _parse_count(raw: Optional[str]) -> int:
    if raw is None:
        return 0
    try:
        return max(0, int(raw))
    except ValueError:
        return 0


class LoginRateLimiter:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Clock = utc_now,
        max_attempts: int = 5,
        lockout_seconds: int = 900,
    ) -> None:
        self._store = store
        self._clock = clock
        self.max_attempts = max_attempts
        self.lockout = timedelta(seconds=lockout_seconds)

    async def check_on_load(self) -> RateLimitState:
        """Re-derive the limiter state from storage.

        A window that has fully elapsed is cleared from the store and
        reported as a clean slate.
        """
        count = _parse_count(await self._store.get(ATTEMPTS_KEY))
        last = from_epoch_ms(await self._store.get(LAST_ATTEMPT_KEY))

        if count == 0 or last is None:
            if count or last is not None:
                await self.clear_on_success()
            return RateLimitState()

        elapsed = self._clock() - last
        if elapsed >= self.lockout:
            await self.clear_on_success()
            return RateLimitState()

        limited = count >= self.max_attempts
        retry_after = (
            math.ceil((self.lockout - elapsed).total_seconds()) if limited else 0
        )
        return RateLimitState(
            attempt_count=count,
            last_attempt_at=last,
            is_limited=limited,
            retry_after_seconds=retry_after,
        )

    async def ensure_allowed(self) -> RateLimitState:
        """Raise RateLimitError while locked out; otherwise return the state."""
        state = await self.check_on_load()
        if state.is_limited:
            log.info(
                "login_blocked_rate_limited",
                attempts=state.attempt_count,
                retry_after_seconds=state.retry_after_seconds,
            )
            raise RateLimitError(
                state.message,
                details={
                    "retry_after_seconds": state.retry_after_seconds,
                    "attempts": state.attempt_count,
                },
            )
        return state

    async def record_failed_attempt(self) -> RateLimitState:
        previous = await self.check_on_load()
        count = previous.attempt_count + 1
        now = self._clock()
        ttl = int(self.lockout.total_seconds())

        await self._store.set(ATTEMPTS_KEY, str(count), ttl_seconds=ttl)
        await self._store.set(LAST_ATTEMPT_KEY, str(to_epoch_ms(now)), ttl_seconds=ttl)

        limited = count >= self.max_attempts
        if limited:
            log.warning(
                "login_rate_limited", attempts=count, lockout_seconds=ttl
            )
        return RateLimitState(
            attempt_count=count,
            last_attempt_at=from_epoch_ms(to_epoch_ms(now)),
            is_limited=limited,
            retry_after_seconds=ttl if limited else 0,
        )

    async def clear_on_success(self) -> None:
        await self._store.delete(ATTEMPTS_KEY, LAST_ATTEMPT_KEY)
