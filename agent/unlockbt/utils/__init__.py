# agent/unlockbt/utils/__init__.py
"""
Utility modules
"""
from .timeutil import parse_ts, to_iso, midnight_utc
from .cache import get_redis_client, get_cached, set_cached

__all__ = [
    # Time
    "parse_ts",
    "to_iso",
    "midnight_utc",
    # Cache
    "get_redis_client",
    "get_cached",
    "set_cached",
]
