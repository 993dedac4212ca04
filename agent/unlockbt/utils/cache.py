# agent/unlockbt/utils/cache.py
"""
Redis-based caching utilities
"""
import json
from typing import Optional, Any

import redis

from .. import config
from ..monitoring.logger import get_logger

logger = get_logger("utils.cache")


def get_redis_client() -> redis.Redis:
    """Redis client for the configured REDIS_URL"""
    return redis.from_url(config.REDIS_URL, decode_responses=True)


def get_cached(key: str, default: Any = None) -> Any:
    """Read a JSON value from Redis; any Redis error counts as a miss."""
    try:
        r = get_redis_client()
        val = r.get(key)
        return json.loads(val) if val else default
    except (redis.RedisError, ValueError) as e:
        logger.warning("Cache read failed, bypassing", key=key, error=str(e))
        return default


def set_cached(key: str, value: Any, ttl: Optional[int] = None) -> bool:
    """Write a JSON value to Redis"""
    try:
        r = get_redis_client()
        serialized = json.dumps(value)
        if ttl:
            r.setex(key, ttl, serialized)
        else:
            r.set(key, serialized)
        return True
    except (redis.RedisError, TypeError) as e:
        logger.warning("Cache write failed", key=key, error=str(e))
        return False
