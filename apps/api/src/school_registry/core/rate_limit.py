"""
Rate Limiting Module

Sliding-window rate limiting backed by Redis, with an in-memory fallback when
Redis is unavailable. Applied to login attempts (per client IP) and to the
mutating school unit endpoints (per user).
"""

import logging
import time

from fastapi import Depends, HTTPException, Request, status
from redis.exceptions import RedisError

from school_registry.core.auth import CurrentUser, get_current_user
from school_registry.core.config import settings
from school_registry.core.redis import get_redis

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: (window_seconds, [timestamp, ...])}
_memory_store: dict[str, tuple[int, list[float]]] = {}


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


async def _check_rate_limit_redis(client, key: str, limit: int, window_seconds: int) -> bool:
    """
    Check rate limit using a Redis sorted set of request timestamps.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _evict_expired(now: float) -> None:
    """Drop keys whose newest hit is older than their window."""
    expired = [
        key
        for key, (window_seconds, hits) in _memory_store.items()
        if not hits or hits[-1] <= now - window_seconds
    ]
    for key in expired:
        del _memory_store[key]


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check rate limit using in-memory storage.

    Only covers the current process. Keys whose window has emptied are
    removed on every check.
    """
    now = time.time()
    window_start = now - window_seconds
    _evict_expired(now)

    _, stored = _memory_store.get(key, (window_seconds, []))
    hits = [ts for ts in stored if ts > window_start]
    if len(hits) >= limit:
        _memory_store[key] = (window_seconds, hits)
        return False

    hits.append(now)
    _memory_store[key] = (window_seconds, hits)
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Args:
        key: Unique key for this rate limit (e.g., "login:127.0.0.1")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    client = get_redis()

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except RedisError as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


async def enforce_rate_limit(key: str, limit: int, window_seconds: int) -> None:
    """
    Raises:
        RateLimitExceeded: If the key is over its limit
    """
    if not await check_rate_limit(key, limit, window_seconds):
        logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
        raise RateLimitExceeded(limit, window_seconds)


async def login_rate_limit(request: Request) -> None:
    """Dependency limiting login attempts per client IP."""
    client_ip = request.client.host if request.client else "unknown"
    await enforce_rate_limit(
        f"login:{client_ip}",
        settings.login_rate_limit,
        settings.login_rate_window_seconds,
    )


async def mutation_rate_limit(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
) -> None:
    """Dependency limiting write requests per authenticated user."""
    await enforce_rate_limit(
        f"mutation:{user.id}:{request.method}",
        settings.mutation_rate_limit,
        settings.mutation_rate_window_seconds,
    )


__all__ = [
    "RateLimitExceeded",
    "check_rate_limit",
    "enforce_rate_limit",
    "login_rate_limit",
    "mutation_rate_limit",
]
