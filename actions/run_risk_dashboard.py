#!/usr/bin/env python3
"""
Multi-scenario risk dashboard on synthetic markets.

**Purpose**: Shows how the standard risk metrics respond to market regime.
Generates a ladder of random walks with per-step volatility rising from 0.01
towards 0.04, plus one crash scenario, and reports:
  - risk metrics per scenario
  - pooled return distribution (histogram) and VaR at 90/95/99%
  - calm-market vs crash-market comparison and relative risk profile

**Usage**:
    python actions/run_risk_dashboard.py
    python actions/run_risk_dashboard.py --scenarios 20 --length 504 --seed 1 \\
        --output data/results/risk_dashboard.csv

Defaults come from the DASHBOARD_* environment variables (see src/config/settings.py).

**Exit codes**:
  - 0: Success
  - 1: Invalid parameters
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.config.settings import get_settings
from src.config.validation import validate_crash_scenario
from src.orchestration.scenarios import (
    DASHBOARD_CRASH_DAY,
    DASHBOARD_CRASH_SEVERITY,
    run_risk_dashboard,
)
from src.utils.errors import InvalidParameters
from src.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser, using settings for defaults."""
    settings = get_settings()
    defaults = settings.dashboard

    parser = argparse.ArgumentParser(
        description="Score a ladder of synthetic scenarios with risk metrics.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--scenarios", type=int, default=defaults.num_scenarios,
                        help=f"Number of random-walk scenarios. Default: {defaults.num_scenarios}.")
    parser.add_argument("--length", type=int, default=defaults.scenario_length,
                        help="Scenario length in trading days. "
                             f"Default: {defaults.scenario_length}.")
    parser.add_argument("--seed", type=int, default=settings.generator.seed,
                        help="Random seed for a reproducible run.")
    parser.add_argument("--output", type=Path, default=None,
                        help="Optional CSV path for the per-scenario metrics.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for the risk dashboard.

    Steps:
      1. Validate that the crash window fits the scenario length.
      2. Generate and score all scenarios.
      3. Print metrics, VaR table, and stress comparison.
      4. Optionally save per-scenario metrics to CSV.
    """
    setup_logging(get_settings().logging)
    args = build_parser().parse_args(argv)

    try:
        if args.scenarios < 1:
            raise InvalidParameters("scenarios", args.scenarios, "need at least one scenario")
        validate_crash_scenario(
            args.length, 100.0, DASHBOARD_CRASH_DAY, DASHBOARD_CRASH_SEVERITY, 0.02
        )
    except InvalidParameters as e:
        print(f"  ✗ {e}")
        return 1

    dashboard = run_risk_dashboard(args.scenarios, args.length, seed=args.seed)

    print("=" * 80)
    print("Risk Dashboard")
    print("=" * 80)
    print()
    print("Per-scenario metrics:")
    metrics = dashboard.metrics_frame()
    print(metrics.to_string(float_format=lambda v: f"{v:.4f}"))
    print()

    print("Value at Risk (pooled daily returns, %):")
    var_table = dashboard.var_table.assign(var=dashboard.var_table['var'] * 100)
    print(var_table.to_string(index=False, float_format=lambda v: f"{v:.2f}"))
    print()

    print("Normal vs stress:")
    print(dashboard.stress_comparison().to_string(float_format=lambda v: f"{v:.4f}"))
    print()

    print("Calm-market risk as % of the crash scenario:")
    print(dashboard.risk_profile().to_string(float_format=lambda v: f"{v:.1f}"))
    print()

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        metrics.to_csv(args.output, index_label="scenario")
        print(f"  ✓ Saved scenario metrics: {args.output}")
        logger.info("wrote %d scenario rows to %s", len(metrics), args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
