"""
Redis Configuration

Shared async Redis client, used as the rate limiting backend.
The client is None until `init_redis()` succeeds; callers fall back
to in-memory behaviour in that case.
"""

from redis.asyncio import Redis, from_url

from app.core.config import settings

# Redis client instance
redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Initialize Redis connection.

    Call this on application startup.
    """
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    # Test connection before publishing the client
    await client.ping()
    redis_client = client
    return redis_client


def is_redis_available() -> bool:
    """Check if Redis client is initialized and available."""
    return redis_client is not None


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
