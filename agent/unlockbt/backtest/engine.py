# agent/unlockbt/backtest/engine.py
"""
Backtest Engine — buy before an unlock, sell after it.

For every local unlock event of a token:
  1. buy_ts  = unlock − hours_before
     sell_ts = unlock + hours_after
  2. As-of price at both instants
  3. Either price missing (or buy price 0) → event skipped
  4. Otherwise one trade, roi = (sell − buy) / buy

Only the local event collection is used: price series exist only locally,
so remote provider events would have nothing to be priced against.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .data_loader import DataStore
from .events import UnlockEvent
from ..utils.timeutil import to_iso
from ..monitoring.logger import get_logger

logger = get_logger("backtest.engine")

SECONDS_PER_HOUR = 3600
MAX_OFFSET_HOURS = 24 * 365 * 100     # keeps buy/sell instants inside datetime range


# ─────────────────────────────────────────────
# Data structures
# ─────────────────────────────────────────────

def coerce_hours(value: Any) -> float:
    """
    Offset in hours; anything absent, non-numeric, non-finite or
    negative becomes 0. Larger than MAX_OFFSET_HOURS is capped.
    """
    if value is None:
        return 0.0
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(hours) or hours < 0:
        return 0.0
    return min(hours, float(MAX_OFFSET_HOURS))


@dataclass
class BacktestParams:
    """Strategy parameterization."""
    token:        str
    hours_before: float = 0.0
    hours_after:  float = 0.0

    def __post_init__(self):
        if not self.token:
            raise ValueError("Token is required")
        self.hours_before = coerce_hours(self.hours_before)
        self.hours_after  = coerce_hours(self.hours_after)


@dataclass
class BacktestTrade:
    """One simulated round trip around an unlock."""
    token:      str
    unlock_ts:  float
    buy_ts:     float
    sell_ts:    float
    buy_price:  float
    sell_price: float
    roi:        float

    @property
    def is_win(self) -> bool:
        return self.roi > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token":     self.token,
            "unlock":    to_iso(self.unlock_ts),
            "buyTs":     to_iso(self.buy_ts),
            "sellTs":    to_iso(self.sell_ts),
            "buyPrice":  self.buy_price,
            "sellPrice": self.sell_price,
            "roi":       self.roi,
        }


@dataclass
class BacktestResult:
    """Aggregate outcome of one backtest run."""
    params:     BacktestParams
    trade_log:  List[BacktestTrade] = field(default_factory=list)
    events:     int = 0      # unlock events considered
    skipped:    int = 0      # events without usable prices

    # Computed
    trades:     int   = 0
    wins:       int   = 0
    win_rate:   float = 0.0
    avg_roi:    float = 0.0
    total_roi:  float = 0.0

    def compute_metrics(self) -> None:
        self.trades    = len(self.trade_log)
        self.wins      = sum(1 for t in self.trade_log if t.is_win)
        self.total_roi = sum(t.roi for t in self.trade_log)

        if self.trades > 0:
            self.win_rate = self.wins / self.trades
            self.avg_roi  = self.total_roi / self.trades
        else:
            self.win_rate = 0.0
            self.avg_roi  = 0.0

    def summary(self) -> Dict[str, Any]:
        """Wire shape of POST /api/backtest."""
        return {
            "trades":  self.trades,
            "winRate": self.win_rate,
            "avgRoi":  self.avg_roi,
        }


# ─────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────

class BacktestEngine:

    def __init__(self, store: DataStore):
        self.store = store

    def run(
        self,
        token: str,
        hours_before: Any = 0.0,
        hours_after: Any = 0.0,
    ) -> BacktestResult:
        """
        Replay every local unlock of `token` through the price lookup.

        Raises:
            ValueError: empty token
        """
        params = BacktestParams(token=token, hours_before=hours_before, hours_after=hours_after)
        events = self.store.unlocks.for_token(params.token)

        result = BacktestResult(params=params, events=len(events))

        for event in events:
            trade = self._simulate(event, params)
            if trade is None:
                result.skipped += 1
                continue
            result.trade_log.append(trade)

        result.compute_metrics()

        logger.backtest(
            params.token,
            result.trades,
            result.win_rate,
            result.avg_roi,
            hours_before=params.hours_before,
            hours_after=params.hours_after,
            events=result.events,
            skipped=result.skipped,
        )
        return result

    def _simulate(self, event: UnlockEvent, params: BacktestParams) -> Optional[BacktestTrade]:
        buy_ts  = event.timestamp - params.hours_before * SECONDS_PER_HOUR
        sell_ts = event.timestamp + params.hours_after * SECONDS_PER_HOUR

        buy_price  = self.store.prices.price_at(params.token, buy_ts)
        sell_price = self.store.prices.price_at(params.token, sell_ts)

        if buy_price is None or sell_price is None:
            return None

        # Zero buy price counts as missing data
        if buy_price == 0:
            logger.warning(
                "Zero buy price, trade skipped",
                token=params.token,
                unlock=to_iso(event.timestamp),
                buy_ts=to_iso(buy_ts),
            )
            return None

        return BacktestTrade(
            token=params.token,
            unlock_ts=event.timestamp,
            buy_ts=buy_ts,
            sell_ts=sell_ts,
            buy_price=buy_price,
            sell_price=sell_price,
            roi=(sell_price - buy_price) / buy_price,
        )


def run_backtest(
    store: DataStore,
    token: str,
    hours_before: Any = 0.0,
    hours_after: Any = 0.0,
) -> BacktestResult:
    return BacktestEngine(store).run(token, hours_before, hours_after)
