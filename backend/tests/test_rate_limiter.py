"""
Sliding-window limiter: limits per key and forgets idle keys.
"""
from datetime import datetime, timedelta, timezone

import pytest

from utils.rate_limiter import RateLimiter

pytestmark = pytest.mark.asyncio


async def test_allows_up_to_limit_then_refuses():
    limiter = RateLimiter()
    for _ in range(3):
        allowed, error = await limiter.check_rate_limit("assistant:a@example.com", 3, 10)
        assert allowed is True
        assert error is None

    allowed, error = await limiter.check_rate_limit("assistant:a@example.com", 3, 10)
    assert allowed is False
    assert "Try again in" in error
    assert len(limiter.attempts["assistant:a@example.com"]) == 3

    allowed, _ = await limiter.check_rate_limit("assistant:b@example.com", 3, 10)
    assert allowed is True


async def test_attempts_outside_window_do_not_count():
    limiter = RateLimiter()
    old = datetime.now(timezone.utc) - timedelta(minutes=11)
    limiter.attempts["assistant:a@example.com"] = [old, old, old]

    allowed, _ = await limiter.check_rate_limit("assistant:a@example.com", 3, 10)
    assert allowed is True
    assert len(limiter.attempts["assistant:a@example.com"]) == 1


async def test_idle_keys_are_dropped():
    limiter = RateLimiter()
    await limiter.check_rate_limit("assistant:gone@example.com", 3, 10)
    await limiter.check_rate_limit("assistant:active@example.com", 3, 10)

    old = datetime.now(timezone.utc) - timedelta(minutes=11)
    limiter.attempts["assistant:gone@example.com"] = [old]
    limiter._last_sweep = old

    await limiter.check_rate_limit("assistant:other@example.com", 3, 10)
    assert "assistant:gone@example.com" not in limiter.attempts
    assert "assistant:gone@example.com" not in limiter.windows
    assert "assistant:active@example.com" in limiter.attempts


async def test_zero_limit_refuses_without_keeping_key():
    limiter = RateLimiter()
    allowed, error = await limiter.check_rate_limit("assistant:a@example.com", 0, 10)
    assert allowed is False
    assert error is not None
    assert limiter.attempts == {}


async def test_reset():
    limiter = RateLimiter()
    limiter.attempts["a"] = [datetime.now(timezone.utc)]
    limiter.attempts["b"] = [datetime.now(timezone.utc)]
    limiter.reset("a")
    assert list(limiter.attempts) == ["b"]
    limiter.reset()
    assert limiter.attempts == {}
