# agent/unlockbt/backtest/events.py
"""
Unlock Event Store — scheduled token unlocks and the token views built on them.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from ..utils.timeutil import to_iso
from .prices import PriceStore


@dataclass(frozen=True)
class UnlockEvent:
    """One unlock occurrence. The same token may appear many times."""
    token:      str
    timestamp:  float          # Unix seconds, UTC
    amount_usd: float = 0.0
    shortable:  bool  = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token":     self.token,
            "timestamp": to_iso(self.timestamp),
            "amountUsd": self.amount_usd,
            "shortable": self.shortable,
        }


class UnlockStore:
    """Immutable, ordered collection of unlock events."""

    def __init__(self, events: Iterable[UnlockEvent] = ()):
        self._events: Tuple[UnlockEvent, ...] = tuple(events)

    def __iter__(self):
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> Tuple[UnlockEvent, ...]:
        return self._events

    def for_token(self, token: str) -> List[UnlockEvent]:
        return [e for e in self._events if e.token == token]

    def shortable_tokens(self) -> List[str]:
        """Distinct tokens with at least one shortable event, first-seen order."""
        return list(dict.fromkeys(e.token for e in self._events if e.shortable))

    def is_shortable(self, token: str) -> bool:
        return any(e.shortable for e in self._events if e.token == token)

    def token_detail(self, token: str, prices: PriceStore) -> Dict[str, Any]:
        events = self.for_token(token)
        return {
            "token":       token,
            "shortable":   self.is_shortable(token),
            "unlocks":     [e.to_dict() for e in events],
            "priceSeries": [p.to_dict() for p in prices.points(token)],
        }

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._events]
