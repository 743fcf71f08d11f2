"""Optional Redis cache.

Redis only caches slow-changing upstream data (the SEC ticker→CIK map).
Every read and write here is best effort: when Redis is missing or
unreachable the caller simply fetches from the upstream again.
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from earnings_tracker.core.logging import get_logger

logger = get_logger(__name__)

# Global Redis instance (initialized in the runtime lifespan)
_redis: Redis | None = None


def get_redis() -> Redis | None:
    """Get the global Redis instance, or None when caching is disabled."""
    return _redis


async def init_redis(redis_url: str) -> Redis:
    """Connect the global Redis instance and verify it answers a ping."""
    global _redis
    client = Redis.from_url(redis_url, decode_responses=False)
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        raise
    _redis = client
    logger.info("Redis connected")
    return _redis


async def close_redis() -> None:
    """Close the global Redis instance."""
    global _redis
    if _redis:
        await _redis.aclose()
        logger.info("Redis disconnected")
        _redis = None


async def cache_get(redis: Redis | None, key: str) -> bytes | None:
    """Read a cached value; errors count as a miss."""
    if redis is None:
        return None
    try:
        value: bytes | None = await redis.get(key)
    except (RedisError, OSError) as e:
        logger.warning("Redis read failed", key=key, error=str(e))
        return None
    return value


async def cache_set(redis: Redis | None, key: str, value: bytes, ttl: int) -> bool:
    """Write a cached value with a TTL in seconds. Returns False if it was not stored."""
    if redis is None:
        return False
    try:
        await redis.set(key, value, ex=ttl)
    except (RedisError, OSError) as e:
        logger.warning("Redis write failed", key=key, error=str(e))
        return False
    return True
