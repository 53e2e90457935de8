"""Redis connection pool.

Learn: Redis is optional. It only backs the rate-limit counters; when it
is not configured or not reachable, get_redis() raises and callers skip
whatever they wanted it for.
"""

from typing import Optional

import redis.asyncio as aioredis

from notekeeper.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis(url: Optional[str] = None) -> aioredis.Redis:
    """Initialize the Redis connection pool."""
    global _redis
    _redis = aioredis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    # Verify connection
    try:
        await _redis.ping()
    except Exception:
        await close_redis()
        raise
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
