"""
Rate Limiting
=============

Redis-based fixed window rate limiting for API endpoints.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status

from app.config import settings
from app.core.errors import ErrorCodes
from app.services.cache import get_redis

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Fixed window rate limiter using Redis.

    Limits are applied per client IP. Defaults come from settings
    (100 requests per 10 minutes).
    """

    @staticmethod
    def _get_key(identifier: str, action: str) -> str:
        """Generate rate limit key."""
        return f"ratelimit:{action}:{identifier}"

    @staticmethod
    async def check_rate_limit(
        identifier: str,
        action: str = "api",
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ) -> dict:
        """
        Check if request is within rate limit.

        Args:
            identifier: Client IP address
            action: Bucket name
            max_requests: Override max requests (optional)
            window_seconds: Override window size (optional)

        Returns:
            Dict with 'allowed', 'remaining', 'reset_in' keys
        """
        max_req = max_requests or settings.RATE_LIMIT_MAX_REQUESTS
        window = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS

        key = RateLimiter._get_key(identifier, action)

        try:
            client = await get_redis()

            # INCR creates the key at 1; the first hit in a window sets the TTL
            current_count = int(await client.incr(key))
            if current_count == 1:
                await client.expire(key, window)
                ttl = window
            else:
                ttl = await client.ttl(key)
                if ttl is None or ttl < 0:
                    await client.expire(key, window)
                    ttl = window

            if current_count > max_req:
                return {
                    "allowed": False,
                    "remaining": 0,
                    "reset_in": ttl,
                }

            return {
                "allowed": True,
                "remaining": max_req - current_count,
                "reset_in": ttl,
            }

        except Exception as e:
            logger.warning("Rate limit check error: %s", e)
            # Allow request on error (fail open)
            return {
                "allowed": True,
                "remaining": max_req,
                "reset_in": window,
            }


async def rate_limit_dependency(
    request: Request,
    action: str = "api",
) -> None:
    """
    FastAPI dependency for rate limiting.

    Raises 429 with Retry-After and X-RateLimit-* headers when the client
    exceeded its window.
    """
    if not settings.RATE_LIMIT_ENABLED:
        return

    identifier = request.client.host if request.client else "unknown"
    result = await RateLimiter.check_rate_limit(identifier, action)

    if not result["allowed"]:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "code": ErrorCodes.RATE_LIMIT_EXCEEDED,
                "message": "Too many requests from this IP, please try again later",
            },
            headers={
                "X-RateLimit-Limit": str(settings.RATE_LIMIT_MAX_REQUESTS),
                "X-RateLimit-Remaining": str(result["remaining"]),
                "X-RateLimit-Reset": str(result["reset_in"]),
                "Retry-After": str(result["reset_in"]),
            },
        )


def create_rate_limit_dependency(action: str = "api"):
    """
    Factory for rate limit dependencies.

    Usage:
        app.include_router(router, dependencies=[Depends(create_rate_limit_dependency())])
    """
    async def dependency(request: Request) -> None:
        await rate_limit_dependency(request, action)

    return dependency
