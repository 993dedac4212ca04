# agent/tests/test_price_lookup.py
"""
Price series store — as-of lookup.
"""
import pytest

T0 = 1_700_000_000.0
HOUR = 3600


def make_points(prices, base_ts=T0, interval=HOUR):
    from unlockbt.backtest.prices import PricePoint
    return [
        PricePoint(timestamp=base_ts + i * interval, price=p)
        for i, p in enumerate(prices)
    ]


def make_store(**series):
    from unlockbt.backtest.prices import PriceStore
    return PriceStore({token: make_points(prices) for token, prices in series.items()})


# ─────────────────────────────────────────────
# price_at
# ─────────────────────────────────────────────

class TestPriceAt:

    def test_before_first_sample_is_none(self):
        store = make_store(AAA=[10.0, 12.0])
        assert store.price_at("AAA", T0 - 1) is None

    def test_exact_first_sample(self):
        store = make_store(AAA=[10.0, 12.0])
        assert store.price_at("AAA", T0) == 10.0

    def test_between_samples_uses_earlier(self):
        # As-of join: no interpolation between 10 and 12
        store = make_store(AAA=[10.0, 12.0])
        assert store.price_at("AAA", T0 + HOUR / 2) == 10.0

    def test_at_or_after_last_sample_returns_last(self):
        store = make_store(AAA=[10.0, 12.0, 9.0])
        last_ts = T0 + 2 * HOUR
        assert store.price_at("AAA", last_ts) == 9.0
        assert store.price_at("AAA", last_ts + 365 * 24 * HOUR) == 9.0

    def test_unknown_token_is_none(self):
        store = make_store(AAA=[10.0])
        assert store.price_at("ZZZ", T0) is None

    def test_empty_series_is_none(self):
        from unlockbt.backtest.prices import PriceStore
        store = PriceStore({"AAA": []})
        assert store.price_at("AAA", T0) is None

    def test_duplicate_instant_later_entry_wins(self):
        from unlockbt.backtest.prices import PricePoint, PriceStore
        store = PriceStore({"AAA": [
            PricePoint(T0, 10.0),
            PricePoint(T0, 11.0),
            PricePoint(T0 + HOUR, 12.0),
        ]})
        assert store.price_at("AAA", T0) == 11.0
        assert store.price_at("AAA", T0 + 30) == 11.0

    def test_idempotent(self):
        store = make_store(AAA=[10.0, 12.0, 14.0])
        ts = T0 + 1.5 * HOUR
        first = store.price_at("AAA", ts)
        assert all(store.price_at("AAA", ts) == first for _ in range(5))


# ─────────────────────────────────────────────
# Series / store accessors
# ─────────────────────────────────────────────

class TestPriceStore:

    def test_points_for_unknown_token_empty(self):
        store = make_store(AAA=[10.0])
        assert store.points("ZZZ") == ()

    def test_tokens_and_membership(self):
        store = make_store(AAA=[1.0], BBB=[2.0])
        assert set(store.tokens) == {"AAA", "BBB"}
        assert "AAA" in store
        assert len(store) == 2

    def test_store_is_read_only(self):
        store = make_store(AAA=[1.0])
        with pytest.raises(TypeError):
            store._series["BBB"] = None

    def test_is_sorted_detects_disorder(self):
        from unlockbt.backtest.prices import PricePoint, PriceSeries
        ok  = PriceSeries("AAA", make_points([1.0, 2.0, 3.0]))
        bad = PriceSeries("AAA", [PricePoint(T0 + HOUR, 1.0), PricePoint(T0, 2.0)])
        assert ok.is_sorted is True
        assert bad.is_sorted is False

    def test_point_serializes_iso_utc(self):
        from unlockbt.backtest.prices import PricePoint
        pt = PricePoint(timestamp=1704067200.0, price=1.5)
        assert pt.to_dict() == {"timestamp": "2024-01-01T00:00:00Z", "price": 1.5}
