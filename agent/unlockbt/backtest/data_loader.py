# agent/unlockbt/backtest/data_loader.py
"""
Fixture Loader — local unlock events and price series.

Files (in DATA_DIR):
  unlocks.json       — [{"token", "timestamp", "amountUsd", "shortable"}, ...]
  price_series.json  — {"TOKEN": [{"timestamp", "price"}, ...], ...}

Loaded once at startup into an immutable DataStore. Fixtures are trusted:
an unsorted series is logged, never reordered.
"""
import json
import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .events import UnlockEvent, UnlockStore
from .prices import PricePoint, PriceStore
from .. import config
from ..utils.timeutil import parse_ts
from ..monitoring.logger import get_logger

logger = get_logger("backtest.loader")

UNLOCKS_FILE = "unlocks.json"
PRICES_FILE  = "price_series.json"


class FixtureError(Exception):
    """Fixture file missing or malformed."""


@dataclass(frozen=True)
class DataStore:
    """Everything the backtester reads, built once per process."""
    unlocks: UnlockStore = field(default_factory=UnlockStore)
    prices:  PriceStore  = field(default_factory=PriceStore)


# ─────────────────────────────────────────────
# Record parsing
# ─────────────────────────────────────────────

def to_amount(value: Any) -> Union[int, float]:
    """USD amount; whole numbers stay int (5000, not 5000.0)."""
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(amount):
        return 0
    return int(amount) if amount.is_integer() else amount


def event_from_dict(raw: Dict[str, Any]) -> UnlockEvent:
    return UnlockEvent(
        token=str(raw["token"]),
        timestamp=parse_ts(raw["timestamp"]),
        amount_usd=to_amount(raw.get("amountUsd")),
        shortable=bool(raw.get("shortable", False)),
    )


def point_from_dict(raw: Dict[str, Any]) -> PricePoint:
    return PricePoint(timestamp=parse_ts(raw["timestamp"]), price=float(raw["price"]))


def build_store(
    unlocks: List[Dict[str, Any]],
    price_series: Dict[str, List[Dict[str, Any]]],
) -> DataStore:
    """Parsed JSON -> DataStore. Raises FixtureError on bad records."""
    try:
        events = [event_from_dict(ev) for ev in unlocks]
        series = {
            token: [point_from_dict(pt) for pt in points]
            for token, points in price_series.items()
        }
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise FixtureError(f"Malformed fixture record: {e}") from e

    prices = PriceStore(series)
    for token in prices.tokens:
        if not prices.series(token).is_sorted:
            logger.warning("Price series not sorted, lookups will be wrong", token=token)

    return DataStore(unlocks=UnlockStore(events), prices=prices)


# ─────────────────────────────────────────────
# Files
# ─────────────────────────────────────────────

def _read_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise FixtureError(f"Fixture not found: {path}") from e
    except json.JSONDecodeError as e:
        raise FixtureError(f"Invalid JSON in {path}: {e}") from e


def load_store(data_dir: Optional[str] = None) -> DataStore:
    """
    Load both fixture files from `data_dir` (default: DATA_DIR).

    Raises:
        FixtureError: missing file, invalid JSON or wrong shape
    """
    data_dir = data_dir or config.DATA_DIR

    unlocks = _read_json(os.path.join(data_dir, UNLOCKS_FILE))
    price_series = _read_json(os.path.join(data_dir, PRICES_FILE))

    if not isinstance(unlocks, list):
        raise FixtureError(f"{UNLOCKS_FILE} must contain a JSON array")
    if not isinstance(price_series, dict):
        raise FixtureError(f"{PRICES_FILE} must contain a JSON object")

    store = build_store(unlocks, price_series)
    logger.info(
        "Fixtures loaded",
        data_dir=data_dir,
        unlocks=len(store.unlocks),
        tokens=len(store.prices),
    )
    return store
