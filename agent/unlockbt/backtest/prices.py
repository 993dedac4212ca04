# agent/unlockbt/backtest/prices.py
"""
Price Series Store — per-token price history and as-of lookup.

Each series is ordered ascending by timestamp. The order is a precondition,
not something checked here: on an unsorted series price_at() silently
returns wrong prices instead of failing.
"""
from bisect import bisect_right
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Any

from ..utils.timeutil import to_iso


# ─────────────────────────────────────────────
# Data structures
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class PricePoint:
    """A single price sample."""
    timestamp: float   # Unix seconds, UTC
    price: float

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": to_iso(self.timestamp), "price": self.price}


@dataclass(frozen=True)
class PriceSeries:
    """Price history of one token, ascending by timestamp."""
    token:  str
    points: Tuple[PricePoint, ...] = ()
    _timestamps: Tuple[float, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "_timestamps", tuple(p.timestamp for p in self.points))

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_sorted(self) -> bool:
        ts = self._timestamps
        return all(a <= b for a, b in zip(ts, ts[1:]))

    def price_at(self, ts: float) -> Optional[float]:
        """
        Last known price at or before `ts` (as-of lookup, no interpolation).

        bisect_right lands after every sample with timestamp <= ts, so among
        samples sharing an instant the last one in the series wins.
        """
        idx = bisect_right(self._timestamps, ts)
        if idx == 0:
            return None
        return self.points[idx - 1].price


# ─────────────────────────────────────────────
# Store
# ─────────────────────────────────────────────

class PriceStore:
    """Read-only mapping token -> PriceSeries."""

    def __init__(self, series: Optional[Mapping[str, Sequence[PricePoint]]] = None):
        built = {
            token: PriceSeries(token=token, points=tuple(points))
            for token, points in (series or {}).items()
        }
        self._series: Mapping[str, PriceSeries] = MappingProxyType(built)

    def __contains__(self, token: str) -> bool:
        return token in self._series

    def __len__(self) -> int:
        return len(self._series)

    @property
    def tokens(self) -> List[str]:
        return list(self._series.keys())

    def series(self, token: str) -> Optional[PriceSeries]:
        return self._series.get(token)

    def points(self, token: str) -> Tuple[PricePoint, ...]:
        """Full series for `token`, empty when the token has none."""
        s = self._series.get(token)
        return s.points if s else ()

    def price_at(self, token: str, ts: float) -> Optional[float]:
        """Price of `token` as of `ts`; None for unknown tokens or ts before the first sample."""
        s = self._series.get(token)
        if s is None:
            return None
        return s.price_at(ts)
