# ===== slotwise/services/rate_limit/rate_limit_store.py =====
"""
Fixed-window request counters for the rate limit middleware.

Stores are created by the application factory and handed to the middleware, so
their lifetime is the application's. Use RedisRateLimitStore when more than one
process serves traffic.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, Protocol, Tuple

import redis.asyncio as redis

from slotwise.config.redis import RedisKeys

logger = logging.getLogger(__name__)

MEMORY_CLEANUP_INTERVAL_SECONDS = 60


@dataclass(frozen=True)
class RateLimitResult:
    limited: bool
    remaining: int
    reset_at: float  # unix timestamp


class RateLimitStore(Protocol):
    async def hit(self, identifier: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        ...


class InMemoryRateLimitStore:
    """
    Per-process counters. Expired windows are reset on access and swept from
    hit() at most once per cleanup interval, so one-off clients do not pile up.
    """

    def __init__(self, clock=time.time, cleanup_interval: float = MEMORY_CLEANUP_INTERVAL_SECONDS):
        self._clock = clock
        self._cleanup_interval = cleanup_interval
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._last_cleanup = clock()

    async def hit(self, identifier: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        # No await between read and write, so this is atomic on the event loop
        now = self._clock()
        if now - self._last_cleanup >= self._cleanup_interval:
            self.purge()

        count, reset_at = self._windows.get(identifier, (0, 0.0))

        if reset_at <= now:
            count, reset_at = 0, now + window_seconds

        count += 1
        self._windows[identifier] = (count, reset_at)

        return RateLimitResult(
            limited=count > max_requests,
            remaining=max(0, max_requests - count),
            reset_at=reset_at,
        )

    def purge(self) -> int:
        """Drop expired windows, returns how many were removed"""
        now = self._clock()
        expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]
        self._last_cleanup = now

        if expired:
            logger.debug(f"Purged {len(expired)} expired rate limit windows")
        return len(expired)


class RedisRateLimitStore:
    """Counters shared by every process through Redis INCR + EXPIRE"""

    def __init__(self, client: redis.Redis):
        self.client = client

    async def hit(self, identifier: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        key = RedisKeys.RATE_LIMIT.format(identifier=identifier)

        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            pipe.ttl(key)
            count, _, ttl = await pipe.execute()

        if ttl is None or ttl < 0:
            ttl = window_seconds

        return RateLimitResult(
            limited=count > max_requests,
            remaining=max(0, max_requests - count),
            reset_at=time.time() + ttl,
        )
