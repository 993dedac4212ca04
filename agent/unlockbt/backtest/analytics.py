# agent/unlockbt/backtest/analytics.py
"""
Backtest Analytics — parameter sweep and text report.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .data_loader import DataStore
from .engine import BacktestEngine, BacktestResult
from .. import config
from ..utils.timeutil import to_iso
from ..monitoring.logger import get_logger

logger = get_logger("backtest.analytics")


# ─────────────────────────────────────────────
# Parameter sweep
# ─────────────────────────────────────────────

def grid_search(
    store: DataStore,
    token: str,
    hours_before_values: Optional[Sequence[Any]] = None,
    hours_after_values: Optional[Sequence[Any]] = None,
) -> List[Dict[str, Any]]:
    """
    Run the backtest over every (hours_before, hours_after) pair.

    Default grid (4×4 = 16):
      hours_before: [1, 6, 24, 72]
      hours_after:  [0, 6, 24, 72]

    Returns rows sorted best first: avgRoi, then winRate, then trades.
    """
    before_values = list(hours_before_values) if hours_before_values else config.SWEEP_HOURS_BEFORE
    after_values  = list(hours_after_values) if hours_after_values else config.SWEEP_HOURS_AFTER

    engine  = BacktestEngine(store)
    results = []

    for hb in before_values:
        for ha in after_values:
            result = engine.run(token, hb, ha)
            results.append({
                "hoursBefore": result.params.hours_before,
                "hoursAfter":  result.params.hours_after,
                **result.summary(),
            })

    results.sort(key=lambda r: (r["avgRoi"], r["winRate"], r["trades"]), reverse=True)

    logger.info(
        "Grid search complete",
        token=token,
        combinations=len(results),
        best_avg_roi=results[0]["avgRoi"] if results else None,
    )
    return results


# ─────────────────────────────────────────────
# Report
# ─────────────────────────────────────────────

def generate_report(result: BacktestResult) -> str:
    """Human-readable backtest report."""
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    p   = result.params

    lines = [
        "=" * 60,
        f"UNLOCK BACKTEST REPORT — {now}",
        "=" * 60,
        "",
        "── PARAMETERS ──────────────────────────────",
        f"  Token:           {p.token}",
        f"  Buy before:      {p.hours_before:g}h",
        f"  Sell after:      {p.hours_after:g}h",
        "",
        "── RESULTS ─────────────────────────────────",
        f"  Unlock events:   {result.events}",
        f"  Skipped:         {result.skipped}",
        f"  Trades:          {result.trades}",
        f"  Win rate:        {result.win_rate * 100:.1f}%",
        f"  Avg ROI:         {result.avg_roi * 100:+.2f}%",
        "",
    ]

    if result.trade_log:
        ranked = sorted(result.trade_log, key=lambda t: t.roi, reverse=True)
        lines.append("── BEST 3 TRADES ───────────────────────────")
        for t in ranked[:3]:
            lines.append(
                f"  {t.roi * 100:+7.2f}%  unlock={to_iso(t.unlock_ts)}  "
                f"buy={t.buy_price:g}  sell={t.sell_price:g}"
            )
        lines.append("")
        lines.append("── WORST 3 TRADES ──────────────────────────")
        for t in ranked[-3:]:
            lines.append(
                f"  {t.roi * 100:+7.2f}%  unlock={to_iso(t.unlock_ts)}  "
                f"buy={t.buy_price:g}  sell={t.sell_price:g}"
            )

    lines.append("")
    lines.append("=" * 60)
    return "\n".join(lines)


def format_sweep(token: str, rows: List[Dict[str, Any]], limit: int = 5) -> str:
    """Top rows of a grid search as text."""
    lines = [
        "=" * 60,
        f"TOP {min(limit, len(rows))} WINDOWS — {token}",
        "=" * 60,
    ]
    for i, r in enumerate(rows[:limit], 1):
        lines.append(
            f"  #{i}  before={r['hoursBefore']:g}h  after={r['hoursAfter']:g}h  "
            f"→ trades={r['trades']}  WR={r['winRate'] * 100:.1f}%  "
            f"avgROI={r['avgRoi'] * 100:+.2f}%"
        )
    return "\n".join(lines)
