#!/usr/bin/env python3
"""
Generate a synthetic market scenario and print (or save) the price paths.

**Scenarios**:
  - normal: one random-walk path (``--outliers`` widens volatility by 1.5x)
  - correlated: a bundle of assets sharing a base-asset factor
  - crash: drift, a 5-day crash, then recovery

**Usage**:
    python actions/generate_synthetic_data.py normal --days 180 --volatility 0.02
    python actions/generate_synthetic_data.py correlated --num-assets 5 --correlation 0.7
    python actions/generate_synthetic_data.py crash --crash-day 90 --crash-severity 0.2 \\
        --seed 42 --output data/results/crash.csv

Defaults come from the SYNTH_* environment variables (see src/config/settings.py).

**Exit codes**:
  - 0: Success
  - 1: Invalid parameters
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.config.settings import get_settings
from src.config.validation import (
    validate_correlated_assets,
    validate_crash_scenario,
    validate_random_walk,
)
from src.orchestration.scenarios import (
    OUTLIER_VOLATILITY_MULTIPLIER,
    SCENARIO_KINDS,
    generate_scenario,
)
from src.utils.errors import InvalidParameters
from src.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)

SCENARIO_TITLES = {
    "normal": "Normal Market Scenario",
    "correlated": "Correlated Assets Scenario",
    "crash": "Market Crash Scenario",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser, using settings for defaults."""
    defaults = get_settings().generator

    parser = argparse.ArgumentParser(
        description="Generate synthetic market price paths.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("scenario", choices=SCENARIO_KINDS, help="Scenario type.")
    parser.add_argument("--days", type=int, default=defaults.days,
                        help=f"Horizon in trading days. Default: {defaults.days}.")
    parser.add_argument("--initial-value", type=float, default=defaults.initial_value,
                        help=f"Starting price. Default: {defaults.initial_value}.")
    parser.add_argument("--volatility", type=float, default=defaults.volatility,
                        help=f"Per-step noise amplitude. Default: {defaults.volatility}.")
    parser.add_argument("--outliers", action="store_true",
                        help="Normal scenario only: multiply volatility by "
                             f"{OUTLIER_VOLATILITY_MULTIPLIER}.")
    parser.add_argument("--num-assets", type=int, default=defaults.num_assets,
                        help=f"Correlated scenario: number of assets. Default: {defaults.num_assets}.")
    parser.add_argument("--correlation", type=float, default=defaults.correlation_strength,
                        help="Correlated scenario: correlation strength in [-1, 1]. "
                             f"Default: {defaults.correlation_strength}.")
    parser.add_argument("--crash-day", type=int, default=defaults.crash_day,
                        help=f"Crash scenario: first crash day. Default: {defaults.crash_day}.")
    parser.add_argument("--crash-severity", type=float, default=defaults.crash_severity,
                        help="Crash scenario: total crash loss in (0, 1). "
                             f"Default: {defaults.crash_severity}.")
    parser.add_argument("--seed", type=int, default=defaults.seed,
                        help="Random seed for a reproducible run.")
    parser.add_argument("--output", type=Path, default=None,
                        help="Optional CSV path for the generated prices.")
    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Reject parameters the generators are not defined for."""
    if args.scenario == "normal":
        validate_random_walk(args.days, args.initial_value, args.volatility)
    elif args.scenario == "correlated":
        validate_correlated_assets(args.days, args.num_assets, args.volatility, args.correlation)
    else:
        validate_crash_scenario(
            args.days, args.initial_value, args.crash_day, args.crash_severity, args.volatility
        )


def to_frame(data: pd.Series | pd.DataFrame) -> pd.DataFrame:
    """Lay out generated prices as a table with a 1-based 'day' column."""
    if isinstance(data, pd.Series):
        frame = data.to_frame(name="price")
    else:
        frame = data.rename(columns=lambda j: f"asset{j + 1}")
    frame.insert(0, "day", range(1, len(frame) + 1))
    return frame


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for synthetic data generation.

    Steps:
      1. Parse and validate arguments.
      2. Generate the scenario.
      3. Print a summary (first/last/min/max per path).
      4. Optionally write the prices to CSV.
    """
    setup_logging(get_settings().logging)
    args = build_parser().parse_args(argv)

    try:
        validate_args(args)
    except InvalidParameters as e:
        print(f"  ✗ {e}")
        return 1

    params = {
        "days": args.days,
        "initial_value": args.initial_value,
        "volatility": args.volatility,
        "include_outliers": args.outliers,
        "num_assets": args.num_assets,
        "correlation_strength": args.correlation,
        "crash_day": args.crash_day,
        "crash_severity": args.crash_severity,
    }
    frame = to_frame(generate_scenario(args.scenario, params, seed=args.seed))

    print("=" * 60)
    print(SCENARIO_TITLES[args.scenario])
    print("=" * 60)
    print(f"Days: {args.days}")
    print(f"Seed: {args.seed if args.seed is not None else 'random'}")
    print()
    prices = frame.drop(columns="day")
    summary = pd.DataFrame({
        "first": prices.iloc[0],
        "last": prices.iloc[-1],
        "min": prices.min(),
        "max": prices.max(),
    })
    print(summary.to_string(float_format=lambda v: f"{v:.2f}"))
    print()

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.output, index=False)
        print(f"  ✓ Saved prices: {args.output}")
        logger.info("wrote %d rows to %s", len(frame), args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
