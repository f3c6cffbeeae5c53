"""
Redis client - cache for catalog item detail.
Failures degrade to cache misses; the database stays the source of truth.
"""

import json
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from money_manager.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

ITEM_CACHE_PREFIX = "item:"

# Shared async Redis client (connection pool managed by redis-py)
_redis: Redis | None = None


def item_cache_key(item_id: int) -> str:
    return f"{ITEM_CACHE_PREFIX}{item_id}"


async def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis


async def cache_get(key: str) -> str | None:
    """Get value from cache. Returns None on miss, when disabled, or on Redis errors."""
    if not settings.cache_enabled:
        return None
    try:
        client = await get_redis()
        return await client.get(key)
    except (RedisError, OSError) as exc:
        logger.warning("Cache read failed for %s: %s", key, exc)
        return None


async def cache_set(key: str, value: str | dict[str, Any], ttl_seconds: int = 300) -> bool:
    """Set value in cache with TTL. Dict is JSON-serialized."""
    if not settings.cache_enabled:
        return False
    try:
        client = await get_redis()
        if isinstance(value, dict):
            value = json.dumps(value)
        await client.setex(key, ttl_seconds, value)
        return True
    except (RedisError, OSError) as exc:
        logger.warning("Cache write failed for %s: %s", key, exc)
        return False


async def cache_delete(key: str) -> bool:
    """Invalidate cache key (after price change, holding change or delete)."""
    if not settings.cache_enabled:
        return False
    try:
        client = await get_redis()
        await client.delete(key)
        return True
    except (RedisError, OSError) as exc:
        logger.warning("Cache invalidation failed for %s: %s", key, exc)
        return False
