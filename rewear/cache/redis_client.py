"""
Redis client - caching of public aggregates and the real-time event channel.
Every helper degrades gracefully: when Redis is down the request still succeeds.
"""

import json
import logging
from typing import Any

from redis.asyncio import Redis

from rewear.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Shared async Redis client (connection pool managed by redis-py)
_redis: Redis | None = None

NOTIFICATION_CHANNEL_PREFIX = "notifications:"


async def get_redis() -> Redis:
    """Get Redis connection, created lazily on first use."""
    global _redis
    if _redis is None:
        _redis = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def cache_get(key: str) -> Any | None:
    """Get a JSON value from cache. Returns None on miss or error."""
    try:
        client = await get_redis()
        raw = await client.get(key)
    except Exception as e:
        logger.warning("cache_get failed: key=%s error=%s", key, e)
        return None
    return json.loads(raw) if raw else None


async def cache_set(key: str, value: Any, ttl_seconds: int | None = None) -> bool:
    """Set a JSON-serializable value with TTL."""
    try:
        client = await get_redis()
        await client.setex(key, ttl_seconds or settings.cache_ttl_seconds, json.dumps(value))
        return True
    except Exception as e:
        logger.warning("cache_set failed: key=%s error=%s", key, e)
        return False


async def cache_delete(*keys: str) -> bool:
    """Invalidate cache keys (e.g. after a swap completes)."""
    try:
        client = await get_redis()
        await client.delete(*keys)
        return True
    except Exception as e:
        logger.warning("cache_delete failed: keys=%s error=%s", keys, e)
        return False


async def incr_with_ttl(key: str, ttl_seconds: int) -> int | None:
    """Increment a counter that expires ttl_seconds after its first hit. None on error."""
    try:
        client = await get_redis()
        count = await client.incr(key)
        if count == 1:
            await client.expire(key, ttl_seconds)
        return count
    except Exception as e:
        logger.warning("incr_with_ttl failed: key=%s error=%s", key, e)
        return None


async def publish_event(user_id: int, event: str, payload: dict[str, Any]) -> bool:
    """Publish a real-time event on the user's channel. Subscribers (websocket
    gateway, mobile push bridge) live outside this service."""
    message = json.dumps({"event": event, "data": payload}, default=str)
    try:
        client = await get_redis()
        await client.publish(f"{NOTIFICATION_CHANNEL_PREFIX}{user_id}", message)
        return True
    except Exception as e:
        logger.warning("publish_event failed: user_id=%s event=%s error=%s", user_id, event, e)
        return False


# Events raised inside a request wait on the session until it commits
PENDING_EVENTS_KEY = "pending_events"


def defer_event(session_info: dict, user_id: int, event: str, payload: dict[str, Any]) -> None:
    """Hold an event until the owning session commits."""
    session_info.setdefault(PENDING_EVENTS_KEY, []).append((user_id, event, payload))


def discard_pending_events(session_info: dict) -> None:
    session_info.pop(PENDING_EVENTS_KEY, None)


async def publish_pending_events(session_info: dict) -> None:
    """Publish events held by a committed session, in the order they were raised."""
    for user_id, event, payload in session_info.pop(PENDING_EVENTS_KEY, []):
        await publish_event(user_id, event, payload)
