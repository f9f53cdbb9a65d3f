"""
Redis caching for the public event listing.

CACHING STRATEGY
================

What we cache:
  - The serialized response of GET /events/all under "events:list:all"

Why:
  - It is the most frequent read (every student home page) and it is public,
    so one cached copy serves everyone

Invalidation:
  - Any event create/update/delete, any purchase (purchase_count changes)
    and any club update/delete (the listing embeds the owner summary)
    drops every "events:list:*" key
  - Invalidation runs only after the mutation has committed; a reader that
    misses the cache in between would otherwise re-cache the old rows
  - TTL-based expiry as safety net

Redis is advisory: if it is disabled or unreachable every call degrades to
a cache miss and the database answers.
"""

import json
from typing import Optional

import redis.asyncio as redis

from campus_events.core.config import get_settings
from campus_events.core.logging import get_logger
from campus_events.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"
ALL_EVENTS_KEY = f"{EVENT_LIST_PREFIX}all"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await client.ping()
            _redis_client = client
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            return None

    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def get_cached_event_list() -> Optional[list[dict]]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(ALL_EVENTS_KEY)
    except Exception as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=ALL_EVENTS_KEY, error=str(e))
        return None

    if data:
        record_cache_operation("get", "hit")
        return json.loads(data)
    record_cache_operation("get", "miss")
    return None


async def set_cached_event_list(events: list[dict]) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(ALL_EVENTS_KEY, settings.REDIS_CACHE_TTL, json.dumps(events, default=str))
        record_cache_operation("set", "ok")
    except Exception as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=ALL_EVENTS_KEY, error=str(e))


async def invalidate_event_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        record_cache_operation("invalidate", "ok")
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        record_cache_operation("invalidate", "error")
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
