# agent/unlockbt/backtest/__init__.py
"""
Backtest module — unlock-window strategy on historical prices.

Modules:
  prices.py      — price series store, as-of lookup
  events.py      — unlock event store, token views
  data_loader.py — JSON fixtures -> DataStore
  engine.py      — backtest engine
  analytics.py   — grid search, text report
"""
from .prices import PricePoint, PriceSeries, PriceStore
from .events import UnlockEvent, UnlockStore
from .data_loader import DataStore, FixtureError, load_store, build_store
from .engine import BacktestEngine, BacktestParams, BacktestResult, BacktestTrade, run_backtest
from .analytics import grid_search, generate_report

__all__ = [
    "PricePoint", "PriceSeries", "PriceStore",
    "UnlockEvent", "UnlockStore",
    "DataStore", "FixtureError", "load_store", "build_store",
    "BacktestEngine", "BacktestParams", "BacktestResult", "BacktestTrade", "run_backtest",
    "grid_search", "generate_report",
]
