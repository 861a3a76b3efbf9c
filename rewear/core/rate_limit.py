"""
Rate limiting - fixed-window request counters per client address, kept in Redis.
When Redis is unreachable requests are let through.
"""

import logging

from fastapi import Request

from rewear.cache import redis_client
from rewear.config import get_settings
from rewear.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)
settings = get_settings()

RATE_LIMIT_KEY_PREFIX = "ratelimit:"


class RateLimiter:
    """FastAPI dependency allowing `times` requests per `seconds` for each client."""

    def __init__(self, scope: str, times: int, seconds: int):
        self.scope = scope
        self.times = times
        self.seconds = seconds

    async def __call__(self, request: Request) -> None:
        if not settings.rate_limit_enabled:
            return
        client = request.client.host if request.client else "unknown"
        count = await redis_client.incr_with_ttl(f"{RATE_LIMIT_KEY_PREFIX}{self.scope}:{client}", self.seconds)
        if count is not None and count > self.times:
            logger.info("rate limited: scope=%s client=%s count=%d", self.scope, client, count)
            raise RateLimitedError("Please try again later", retry_after=self.seconds)


api_rate_limit = RateLimiter("api", settings.api_rate_limit, settings.rate_limit_window_seconds)
# Shared by login and registration
auth_rate_limit = RateLimiter("auth", settings.auth_rate_limit, settings.rate_limit_window_seconds)
