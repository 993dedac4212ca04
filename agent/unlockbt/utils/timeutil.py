# agent/unlockbt/utils/timeutil.py
"""
Timestamp helpers — internal Unix seconds <-> ISO-8601 UTC strings
"""
from datetime import datetime, date, timezone
from typing import Any


def parse_ts(value: Any) -> float:
    """
    ISO-8601 string (or Unix seconds) -> Unix seconds.

    Strings without an offset are read as UTC. Raises ValueError on
    anything unparseable.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not a timestamp: {value!r}")

    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def to_iso(ts: float) -> str:
    """Unix seconds -> '2024-01-01T00:00:00Z' (milliseconds only when present)."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    if dt.microsecond:
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def midnight_utc(value: Any) -> float:
    """Calendar date of `value` at 00:00 UTC, in Unix seconds."""
    if not isinstance(value, str):
        raise ValueError(f"not a date: {value!r}")
    d = date.fromisoformat(value.strip()[:10])
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp()
