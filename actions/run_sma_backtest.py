#!/usr/bin/env python3
"""
Backtest an SMA crossover strategy on synthetic normal and crash markets.

**Purpose**: A trend-following rule that looks fine on a calm random walk can
behave very differently when the market crashes. This script runs the same
SMA(short, long) strategy on a normal market and, with ``--stress``, on a
crash market of the same length, and prints the risk metrics side by side.

**Markets**:
  - normal: random walk from 100, volatility 0.015
  - stress: crash path from 100, 25% crash starting at 60% of the horizon

**Usage**:
    python actions/run_sma_backtest.py --short 10 --long 50 --days 180 --stress
    python actions/run_sma_backtest.py --seed 7 --output data/results/sma_metrics.json

Defaults come from the BACKTEST_* environment variables (see src/config/settings.py).

**Exit codes**:
  - 0: Success
  - 1: Invalid parameters
"""

import argparse
import json
import logging
import math
import sys
from pathlib import Path

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.config.settings import get_settings
from src.config.validation import validate_crash_scenario, validate_days, validate_sma_periods
from src.orchestration.scenarios import (
    BACKTEST_STRESS_CRASH_FRACTION,
    BACKTEST_STRESS_SEVERITY,
    BacktestComparison,
    run_backtest_comparison,
)
from src.utils.errors import InvalidParameters
from src.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser, using settings for defaults."""
    defaults = get_settings().backtest

    parser = argparse.ArgumentParser(
        description="Run an SMA crossover backtest on synthetic markets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--short", type=int, default=defaults.short_period,
                        help=f"Short SMA period. Default: {defaults.short_period}.")
    parser.add_argument("--long", type=int, default=defaults.long_period,
                        help=f"Long SMA period. Default: {defaults.long_period}.")
    parser.add_argument("--days", type=int, default=defaults.time_horizon,
                        help=f"Time horizon in trading days. Default: {defaults.time_horizon}.")
    parser.add_argument("--stress", action="store_true",
                        help="Also run the strategy on a crash scenario.")
    parser.add_argument("--seed", type=int, default=get_settings().generator.seed,
                        help="Random seed for a reproducible run.")
    parser.add_argument("--output", type=Path, default=None,
                        help="Optional JSON path for the metrics.")
    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Reject parameters the backtest is not defined for."""
    validate_days(args.days)
    validate_sma_periods(args.short, args.long)
    if args.stress:
        crash_day = math.floor(args.days * BACKTEST_STRESS_CRASH_FRACTION)
        validate_crash_scenario(args.days, 100.0, crash_day, BACKTEST_STRESS_SEVERITY, 0.02)


def summarize(comparison: BacktestComparison) -> dict:
    """Build a JSON-serializable summary of the comparison."""
    summary = {
        "normal": {
            **comparison.normal.metrics.to_dict(),
            "days_long": int(comparison.normal.backtest.positions.sum()),
            "position_changes": comparison.normal.backtest.num_trades,
        },
    }
    if comparison.stress is not None:
        summary["stress"] = {
            **comparison.stress.metrics.to_dict(),
            "days_long": int(comparison.stress.backtest.positions.sum()),
            "position_changes": comparison.stress.backtest.num_trades,
        }
    return summary


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for the SMA crossover backtest.

    Steps:
      1. Parse and validate arguments (short < long, crash fits in horizon).
      2. Generate markets and run the backtests.
      3. Print the metrics table.
      4. Optionally save metrics to JSON.
    """
    setup_logging(get_settings().logging)
    args = build_parser().parse_args(argv)

    try:
        validate_args(args)
    except InvalidParameters as e:
        print(f"  ✗ Invalid Parameters: {e}")
        return 1

    print("=" * 80)
    print(f"Backtest Results: SMA({args.short},{args.long}) Strategy")
    print("=" * 80)
    print(f"Time horizon: {args.days} days")
    print(f"Stress tests: {'on' if args.stress else 'off'}")
    print()

    comparison = run_backtest_comparison(
        args.days,
        args.short,
        args.long,
        include_stress_tests=args.stress,
        seed=args.seed,
    )

    print(comparison.metrics_table().to_string(float_format=lambda v: f"{v:.4f}"))
    print()

    summary = summarize(comparison)
    for market, values in summary.items():
        print(f"  {market}: {values['days_long']} days long, "
              f"{values['position_changes']} position changes")
    print()

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump(summary, f, indent=2)
        print(f"  ✓ Saved metrics: {args.output}")
        logger.info("wrote backtest metrics to %s", args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
