"""
Rate Limiting Module

Provides rate limiting for API endpoints using Redis as the backend.
Falls back to in-memory storage if Redis is unavailable.

SECURITY: Rate limiting prevents abuse of sensitive endpoints like:
- OTP request endpoints (prevents email bombing and code cycling)
- Admin login (prevents brute force)
- Admin review actions (prevents mass operations)
"""

import logging
import secrets
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from fastapi import HTTPException, Request, status

from app.core import redis as redis_state

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [(timestamp, count), ...]}
_memory_store: dict[str, list[tuple[float, int]]] = {}


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Count `key` in a Redis sorted set scored by request time.

    Entries older than the window are trimmed first, so the count is the
    number of requests in the last `window_seconds`. Returns False when
    that count has already reached `limit`.
    """
    now = time.time()
    window_start = now - window_seconds

    # Use a pipeline for atomic operations
    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    # Members must be unique or same-instant requests collapse into one
    pipe.zadd(key, {f"{now}:{secrets.token_hex(4)}": now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Count `key` in the process-local window store.

    Used while Redis is down or unconfigured; counts are per worker process.
    """
    now = time.time()
    window_start = now - window_seconds

    entries = [(ts, count) for ts, count in _memory_store.get(key, []) if ts > window_start]
    current_count = sum(count for _, count in entries)

    if current_count >= limit:
        _memory_store[key] = entries
        return False

    entries.append((now, 1))
    _memory_store[key] = entries
    return True


async def check_rate_limit(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check if a request is within rate limits.

    Uses the application's Redis client when connected, otherwise
    in-memory storage.

    Args:
        key: Unique key for this rate limit
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    client = redis_state.redis_client

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


async def enforce_rate_limit(key: str, limit: int, window_seconds: int) -> None:
    """
    Raise RateLimitExceeded when `key` is over its limit.

    Raises:
        RateLimitExceeded: HTTP 429 with Retry-After
    """
    if not await check_rate_limit(key, limit, window_seconds):
        logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
        raise RateLimitExceeded(limit, window_seconds)


def rate_limit(
    limit: int = 10,
    window_seconds: int = 60,
    key_func: Callable[[Request], str] | None = None,
):
    """
    Limit calls to an endpoint that takes a `Request` argument.

    Requests are counted per client IP and path unless `key_func` builds
    the key from the request.

    Raises:
        RateLimitExceeded: HTTP 429 once `limit` calls land inside `window_seconds`
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            # Find request object in args or kwargs
            request: Request | None = None
            for arg in args:
                if isinstance(arg, Request):
                    request = arg
                    break
            if not request:
                request = kwargs.get("request")

            if not request:
                logger.warning(
                    f"Rate limit decorator on {func.__name__} couldn't find Request object"
                )
                return await func(*args, **kwargs)

            if key_func:
                key = key_func(request)
            else:
                client_ip = request.client.host if request.client else "unknown"
                key = f"rate_limit:{client_ip}:{request.url.path}"

            await enforce_rate_limit(key, limit, window_seconds)

            return await func(*args, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "rate_limit",
    "check_rate_limit",
    "enforce_rate_limit",
    "RateLimitExceeded",
]
