# agent/tests/test_backtest_engine.py
"""
Backtest engine, parameter coercion and analytics.

Scenario used throughout:
  AAA prices  = [(t0, 10.0), (t0+1h, 12.0)]
  AAA unlock  = t0+1h
"""
import math
import pytest

T0 = 1_700_000_000.0
HOUR = 3600


# ─────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────

def make_store(series=None, events=None):
    from unlockbt.backtest.data_loader import DataStore
    from unlockbt.backtest.events import UnlockEvent, UnlockStore
    from unlockbt.backtest.prices import PricePoint, PriceStore

    if series is None:
        series = {"AAA": [(T0, 10.0), (T0 + HOUR, 12.0)]}
    if events is None:
        events = [("AAA", T0 + HOUR)]

    return DataStore(
        unlocks=UnlockStore(UnlockEvent(token=tok, timestamp=ts) for tok, ts in events),
        prices=PriceStore({
            tok: [PricePoint(ts, p) for ts, p in pts] for tok, pts in series.items()
        }),
    )


# ─────────────────────────────────────────────
# coerce_hours / BacktestParams
# ─────────────────────────────────────────────

class TestCoerceHours:

    @pytest.mark.parametrize("raw", [None, "abc", "", float("nan"), float("inf"), -5, [], {}])
    def test_bad_values_become_zero(self, raw):
        from unlockbt.backtest.engine import coerce_hours
        assert coerce_hours(raw) == 0.0

    @pytest.mark.parametrize("raw,expected", [(2, 2.0), ("1.5", 1.5), (" 24 ", 24.0), (0, 0.0)])
    def test_numeric_values_kept(self, raw, expected):
        from unlockbt.backtest.engine import coerce_hours
        assert coerce_hours(raw) == expected

    def test_huge_offset_capped(self):
        from unlockbt.backtest.engine import coerce_hours, MAX_OFFSET_HOURS
        assert coerce_hours(1e12) == MAX_OFFSET_HOURS
        assert coerce_hours(MAX_OFFSET_HOURS - 1) == MAX_OFFSET_HOURS - 1

    def test_params_require_token(self):
        from unlockbt.backtest.engine import BacktestParams
        with pytest.raises(ValueError, match="Token is required"):
            BacktestParams(token="")

    def test_params_coerce_offsets(self):
        from unlockbt.backtest.engine import BacktestParams
        p = BacktestParams(token="AAA", hours_before="x", hours_after="3")
        assert p.hours_before == 0.0
        assert p.hours_after == 3.0


# ─────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────

class TestBacktestEngine:

    def test_single_winning_trade(self):
        from unlockbt.backtest.engine import run_backtest
        result = run_backtest(make_store(), "AAA", hours_before=1, hours_after=0)
        assert result.summary() == {
            "trades":  1,
            "winRate": 1.0,
            "avgRoi":  pytest.approx(0.2),
        }
        trade = result.trade_log[0]
        assert trade.buy_price == 10.0
        assert trade.sell_price == 12.0
        assert trade.buy_ts == T0
        assert trade.sell_ts == T0 + HOUR

    def test_buy_before_first_sample_is_skipped(self):
        from unlockbt.backtest.engine import run_backtest
        result = run_backtest(make_store(), "AAA", hours_before=2, hours_after=0)
        assert result.summary() == {"trades": 0, "winRate": 0.0, "avgRoi": 0.0}
        assert result.events == 1
        assert result.skipped == 1

    def test_token_without_events(self):
        from unlockbt.backtest.engine import run_backtest
        result = run_backtest(make_store(), "ZZZ", 1, 1)
        assert result.summary() == {"trades": 0, "winRate": 0.0, "avgRoi": 0.0}
        assert result.events == 0

    def test_events_without_price_coverage(self):
        from unlockbt.backtest.engine import run_backtest
        store = make_store(events=[("BBB", T0), ("BBB", T0 + HOUR)])
        result = run_backtest(store, "BBB", 1, 1)
        assert result.summary() == {"trades": 0, "winRate": 0.0, "avgRoi": 0.0}
        assert result.skipped == 2

    def test_zero_roi_is_not_a_win(self):
        from unlockbt.backtest.engine import run_backtest
        store = make_store(series={"AAA": [(T0, 10.0), (T0 + HOUR, 10.0)]})
        result = run_backtest(store, "AAA", 1, 0)
        assert result.trades == 1
        assert result.win_rate == 0.0
        assert result.avg_roi == 0.0

    def test_zero_buy_price_skipped_not_infinite(self):
        from unlockbt.backtest.engine import run_backtest
        store = make_store(series={"AAA": [(T0, 0.0), (T0 + HOUR, 5.0)]})
        result = run_backtest(store, "AAA", 1, 0)
        assert result.trades == 0
        assert result.skipped == 1
        assert math.isfinite(result.avg_roi)

    def test_mixed_trades_aggregate(self):
        from unlockbt.backtest.engine import run_backtest
        store = make_store(
            series={"AAA": [
                (T0, 10.0), (T0 + HOUR, 11.0),                 # +10%
                (T0 + 10 * HOUR, 20.0), (T0 + 11 * HOUR, 15.0),  # -25%
            ]},
            events=[("AAA", T0 + HOUR), ("AAA", T0 + 11 * HOUR), ("AAA", T0 - HOUR)],
        )
        result = run_backtest(store, "AAA", 1, 0)
        assert result.events == 3
        assert result.trades == 2
        assert result.skipped == 1
        assert result.win_rate == pytest.approx(0.5)
        assert result.avg_roi == pytest.approx((0.10 - 0.25) / 2)

    def test_only_selected_token_is_replayed(self):
        from unlockbt.backtest.engine import run_backtest
        store = make_store(
            series={
                "AAA": [(T0, 10.0), (T0 + HOUR, 12.0)],
                "BBB": [(T0, 10.0), (T0 + HOUR, 5.0)],
            },
            events=[("AAA", T0 + HOUR), ("BBB", T0 + HOUR)],
        )
        result = run_backtest(store, "BBB", 1, 0)
        assert result.trades == 1
        assert result.avg_roi == pytest.approx(-0.5)

    def test_deterministic(self):
        from unlockbt.backtest.engine import BacktestEngine
        engine = BacktestEngine(make_store())
        assert engine.run("AAA", 1, 0).summary() == engine.run("AAA", 1, 0).summary()

    def test_huge_offset_trade_still_serializes(self):
        from unlockbt.backtest.engine import run_backtest
        result = run_backtest(make_store(), "AAA", hours_before=0, hours_after=1e12)
        assert result.trades == 1
        row = result.trade_log[0].to_dict()
        assert row["sellTs"].endswith("Z")
        assert row["sellTs"] > row["unlock"]

    def test_non_numeric_offsets_treated_as_zero(self):
        from unlockbt.backtest.engine import run_backtest
        # Both legs land on the unlock itself: 12 -> 12
        result = run_backtest(make_store(), "AAA", "abc", None)
        assert result.trades == 1
        assert result.avg_roi == 0.0


# ─────────────────────────────────────────────
# Analytics
# ─────────────────────────────────────────────

class TestAnalytics:

    def test_grid_search_sorted_by_avg_roi(self):
        from unlockbt.backtest.analytics import grid_search
        rows = grid_search(make_store(), "AAA", [2, 1], [0])
        assert [r["hoursBefore"] for r in rows] == [1.0, 2.0]
        assert rows[0]["avgRoi"] == pytest.approx(0.2)
        assert rows[1]["trades"] == 0

    def test_grid_search_default_grid(self):
        from unlockbt import config
        from unlockbt.backtest.analytics import grid_search
        rows = grid_search(make_store(), "AAA")
        assert len(rows) == len(config.SWEEP_HOURS_BEFORE) * len(config.SWEEP_HOURS_AFTER)

    def test_report_contains_summary(self):
        from unlockbt.backtest.engine import run_backtest
        from unlockbt.backtest.analytics import generate_report
        report = generate_report(run_backtest(make_store(), "AAA", 1, 0))
        assert "Token:           AAA" in report
        assert "Trades:          1" in report
        assert "+20.00%" in report

    def test_report_without_trades(self):
        from unlockbt.backtest.engine import run_backtest
        from unlockbt.backtest.analytics import generate_report
        report = generate_report(run_backtest(make_store(), "ZZZ", 1, 0))
        assert "Trades:          0" in report
        assert "BEST 3 TRADES" not in report
