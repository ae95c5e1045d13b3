"""
Rate Limit Tests
================

Fixed window counting against a mocked Redis client, plus the 429
envelope returned through the API.
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.config import settings
from app.core.rate_limit import RateLimiter


def _redis(count: int, ttl: int = 42) -> AsyncMock:
    client = AsyncMock()
    client.incr.return_value = count
    client.ttl.return_value = ttl
    return client


class TestCheckRateLimit:

    @pytest.mark.asyncio
    async def test_first_hit_starts_window(self):
        client = _redis(1)

        with patch("app.core.rate_limit.get_redis", return_value=client):
            result = await RateLimiter.check_rate_limit("10.0.0.1", max_requests=5, window_seconds=60)

        assert result == {"allowed": True, "remaining": 4, "reset_in": 60}
        client.incr.assert_awaited_once_with("ratelimit:api:10.0.0.1")
        client.expire.assert_awaited_once_with("ratelimit:api:10.0.0.1", 60)

    @pytest.mark.asyncio
    async def test_within_window_keeps_ttl(self):
        client = _redis(3, ttl=30)

        with patch("app.core.rate_limit.get_redis", return_value=client):
            result = await RateLimiter.check_rate_limit("10.0.0.1", max_requests=5, window_seconds=60)

        assert result == {"allowed": True, "remaining": 2, "reset_in": 30}
        client.expire.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_ttl_is_repaired(self):
        client = _redis(2, ttl=-1)

        with patch("app.core.rate_limit.get_redis", return_value=client):
            result = await RateLimiter.check_rate_limit("10.0.0.1", max_requests=5, window_seconds=60)

        assert result["reset_in"] == 60
        client.expire.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_over_limit_is_blocked(self):
        client = _redis(6, ttl=12)

        with patch("app.core.rate_limit.get_redis", return_value=client):
            result = await RateLimiter.check_rate_limit("10.0.0.1", max_requests=5, window_seconds=60)

        assert result == {"allowed": False, "remaining": 0, "reset_in": 12}

    @pytest.mark.asyncio
    async def test_redis_failure_fails_open(self):
        client = AsyncMock()
        client.incr.side_effect = ConnectionError("redis down")

        with patch("app.core.rate_limit.get_redis", return_value=client):
            result = await RateLimiter.check_rate_limit("10.0.0.1", max_requests=5, window_seconds=60)

        assert result == {"allowed": True, "remaining": 5, "reset_in": 60}


class TestRateLimitedRoutes:

    @pytest.mark.asyncio
    async def test_blocked_request_gets_429_envelope(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)

        with patch("app.core.rate_limit.get_redis", return_value=_redis(10_000, ttl=17)):
            response = await client.get("/api/auth/me")

        assert response.status_code == 429
        assert response.headers["retry-after"] == "17"
        assert response.headers["x-ratelimit-remaining"] == "0"
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "RATE_LIMIT"

    @pytest.mark.asyncio
    async def test_health_is_not_rate_limited(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)

        with patch("app.core.rate_limit.get_redis", return_value=_redis(10_000)):
            response = await client.get("/health")

        assert response.status_code == 200
