# agent/unlockbt/sources/__init__.py
"""
External unlock data sources
"""
from .dropstab import (
    DropsTabSource,
    FetchOutcome,
    normalize_record,
    parse_unlocks_payload,
    resolve_unlocks,
)

__all__ = [
    "DropsTabSource",
    "FetchOutcome",
    "normalize_record",
    "parse_unlocks_payload",
    "resolve_unlocks",
]
