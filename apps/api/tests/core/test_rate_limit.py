"""
Tests for the rate limiter's in-memory fallback.
"""

from unittest.mock import MagicMock, patch

import pytest

from school_registry.core import rate_limit
from school_registry.core.rate_limit import RateLimitExceeded, check_rate_limit, enforce_rate_limit


@pytest.fixture(autouse=True)
def clear_memory_store():
    rate_limit._memory_store.clear()
    yield
    rate_limit._memory_store.clear()


@pytest.mark.asyncio
async def test_memory_fallback_blocks_after_limit():
    with patch("school_registry.core.rate_limit.get_redis", return_value=None):
        results = [await check_rate_limit("test:key", 3, 60) for _ in range(4)]

    assert results == [True, True, True, False]


@pytest.mark.asyncio
async def test_keys_are_independent():
    with patch("school_registry.core.rate_limit.get_redis", return_value=None):
        assert await check_rate_limit("test:a", 1, 60) is True
        assert await check_rate_limit("test:b", 1, 60) is True
        assert await check_rate_limit("test:a", 1, 60) is False


@pytest.mark.asyncio
async def test_enforce_raises_429():
    with patch("school_registry.core.rate_limit.get_redis", return_value=None):
        await enforce_rate_limit("test:enforce", 1, 60)

        with pytest.raises(RateLimitExceeded) as exc_info:
            await enforce_rate_limit("test:enforce", 1, 60)

    assert exc_info.value.status_code == 429
    assert exc_info.value.headers["Retry-After"] == "60"


@pytest.mark.asyncio
async def test_memory_fallback_evicts_keys_after_their_window():
    """Idle keys do not accumulate in the fallback store."""
    clock = MagicMock()
    clock.time.side_effect = [1000.0, 1000.0, 1120.0]

    with (
        patch("school_registry.core.rate_limit.get_redis", return_value=None),
        patch("school_registry.core.rate_limit.time", clock),
    ):
        await check_rate_limit("login:10.0.0.1", 5, 60)
        await check_rate_limit("login:10.0.0.2", 5, 60)
        assert set(rate_limit._memory_store) == {"login:10.0.0.1", "login:10.0.0.2"}

        await check_rate_limit("login:10.0.0.3", 5, 60)

    assert set(rate_limit._memory_store) == {"login:10.0.0.3"}


@pytest.mark.asyncio
async def test_memory_fallback_keeps_keys_inside_their_window():
    clock = MagicMock()
    clock.time.side_effect = [1000.0, 1030.0]

    with (
        patch("school_registry.core.rate_limit.get_redis", return_value=None),
        patch("school_registry.core.rate_limit.time", clock),
    ):
        await check_rate_limit("mutation:7:POST", 5, 60)
        await check_rate_limit("mutation:8:POST", 5, 60)

    assert set(rate_limit._memory_store) == {"mutation:7:POST", "mutation:8:POST"}
