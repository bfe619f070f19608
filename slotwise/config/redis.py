# slotwise/config/redis.py
"""Redis connection pool backing the shared rate limit counters"""
import redis.asyncio as redis
from typing import Optional

from slotwise.config.settings import get_settings

settings = get_settings()

_redis_pool: Optional[redis.ConnectionPool] = None


def get_redis_pool() -> redis.ConnectionPool:
    """Created on first use; no connection is opened until the first command"""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            retry_on_timeout=True,
        )
    return _redis_pool


async def get_redis() -> redis.Redis:
    return redis.Redis(connection_pool=get_redis_pool())


async def close_redis_pool() -> None:
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None


class RedisKeys:
    """Key patterns, namespaced so the instance can be shared"""

    # Fixed-window counter per "<rule>:<client>" identifier
    RATE_LIMIT = "slotwise:ratelimit:{identifier}"
