#!/usr/bin/env python3
# scripts/backtest.py
"""
Backtest CLI — buy before a token unlock, sell after it.

Usage:
  # Single window: buy 24h before each ARB unlock, sell 12h after
  python scripts/backtest.py --token ARB --before 24 --after 12

  # Grid search over hour windows
  python scripts/backtest.py --token ARB --sweep
  python scripts/backtest.py --token ARB --sweep --before-grid 6,24,48 --after-grid 0,24

  # Same thing through the API
  curl -X POST http://localhost:3000/api/backtest \
       -H "Content-Type: application/json" \
       -d '{"token": "ARB", "hoursBefore": 24, "hoursAfter": 12}'
"""
import sys
import os
import argparse
import json

from dotenv import load_dotenv

# Put the agent folder on the Python path
AGENT_DIR = os.path.join(os.path.dirname(__file__), '..', 'agent')
sys.path.insert(0, AGENT_DIR)

# Load .env (if present) before unlockbt.config reads the environment
ENV_PATH = os.path.join(os.path.dirname(__file__), '..', '.env')
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)


def _grid(value: str) -> list:
    return [float(x) for x in value.split(",") if x.strip()]


def run_backtest(
    token: str,
    hours_before: float = 0.0,
    hours_after: float = 0.0,
    data_dir: str = "",
    verbose: bool = True,
) -> dict:
    """Run one window and return the result dict."""
    from unlockbt.backtest.data_loader import load_store
    from unlockbt.backtest.engine import BacktestEngine
    from unlockbt.backtest.analytics import generate_report

    store  = load_store(data_dir or None)
    result = BacktestEngine(store).run(token, hours_before, hours_after)

    if verbose:
        print(generate_report(result))

    return {
        **result.summary(),
        "events":  result.events,
        "skipped": result.skipped,
        "log":     [t.to_dict() for t in result.trade_log],
    }


def run_sweep(
    token: str,
    before_grid: list = None,
    after_grid: list = None,
    data_dir: str = "",
    top: int = 5,
    verbose: bool = True,
) -> list:
    """Grid search over (hours_before, hours_after)."""
    from unlockbt.backtest.data_loader import load_store
    from unlockbt.backtest.analytics import grid_search, format_sweep

    store = load_store(data_dir or None)
    rows  = grid_search(store, token, before_grid, after_grid)

    if verbose:
        print(format_sweep(token, rows, limit=top))

    return rows


def main():
    parser = argparse.ArgumentParser(
        description="Token unlock backtest CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--token",       type=str,   required=True, help="Token symbol, e.g. ARB")
    parser.add_argument("--before",      type=float, default=0.0,  help="Buy N hours before unlock (default: 0)")
    parser.add_argument("--after",       type=float, default=0.0,  help="Sell N hours after unlock (default: 0)")
    parser.add_argument("--data-dir",    type=str,   default="",   help="Fixture directory (default: DATA_DIR)")
    parser.add_argument("--sweep",       action="store_true",      help="Grid search mode")
    parser.add_argument("--before-grid", type=_grid, default=None, help="Comma list of hours before for --sweep")
    parser.add_argument("--after-grid",  type=_grid, default=None, help="Comma list of hours after for --sweep")
    parser.add_argument("--top",         type=int,   default=5,    help="Rows to show with --sweep (default: 5)")
    parser.add_argument("--json",        action="store_true",      help="Print the result as JSON")

    args = parser.parse_args()

    if args.sweep:
        rows = run_sweep(
            token=args.token,
            before_grid=args.before_grid,
            after_grid=args.after_grid,
            data_dir=args.data_dir,
            top=args.top,
            verbose=not args.json,
        )
        if args.json:
            print(json.dumps(rows[:args.top], indent=2))
    else:
        result = run_backtest(
            token=args.token,
            hours_before=args.before,
            hours_after=args.after,
            data_dir=args.data_dir,
            verbose=not args.json,
        )
        if args.json:
            print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
