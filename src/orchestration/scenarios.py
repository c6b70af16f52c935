"""
Scenario workflows combining the generators, backtester, and risk metrics.

**Conceptual**: The engine functions are small and pure. Most questions a user
actually asks ("how does my SMA strategy hold up in a crash?", "how do the
risk metrics scale with volatility?") need several of them chained together.
This module packages those chains as reusable workflows:

  - ``generate_scenario``: one dispatch point for the three generators.
  - ``run_backtest_comparison``: SMA backtest on a normal market and,
    optionally, on a crash market, each scored with the risk calculator.
  - ``run_risk_dashboard``: a ladder of random walks of increasing volatility
    plus a crash path, scored on their raw daily returns, with a pooled
    return distribution and VaR table.
  - ``run_market_overview``: a normal and a stress path side by side.

Every workflow draws from a single random generator passed in (or created
from a seed), so a seeded run is fully reproducible. Scenarios within a
workflow are independent of each other and share no state besides that
generator.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from src.analytics.risk_metrics import (
    RiskMetrics,
    calculate_risk_metrics,
    calculate_var_table,
    compute_return_histogram,
    ieee_divide,
)
from src.analytics.synthetic_data import (
    generate_correlated_assets,
    generate_crash_scenario,
    generate_random_walk,
    resolve_rng,
)
from src.backtesting.engine import BacktestResult, backtest_sma
from src.utils.math import calculate_daily_returns

logger = logging.getLogger(__name__)

SCENARIO_KINDS = ("normal", "correlated", "crash")

# Volatility multiplier applied to the normal scenario when outliers are requested.
OUTLIER_VOLATILITY_MULTIPLIER = 1.5

# Backtest comparison markets.
BACKTEST_NORMAL_VOLATILITY = 0.015
BACKTEST_STRESS_CRASH_FRACTION = 0.6
BACKTEST_STRESS_SEVERITY = 0.25

# Risk dashboard scenario ladder.
DASHBOARD_BASE_VOLATILITY = 0.01
DASHBOARD_VOLATILITY_SPAN = 0.03
DASHBOARD_CRASH_DAY = 120
DASHBOARD_CRASH_SEVERITY = 0.3
DASHBOARD_HISTOGRAM_BINS = 30

# Market overview paths.
OVERVIEW_NORMAL_VOLATILITY = 0.015
OVERVIEW_CRASH_DAY = 90
OVERVIEW_CRASH_SEVERITY = 0.25


def generate_scenario(
    kind: str,
    params: dict[str, Any],
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> pd.Series | pd.DataFrame:
    """
    Generate one scenario by name.

    Args:
        kind: "normal", "correlated", or "crash".
        params: Keyword parameters. Recognised keys:
            - all kinds: days, volatility
            - normal: initial_value, include_outliers (bool; volatility * 1.5)
            - correlated: num_assets, correlation_strength
            - crash: initial_value, crash_day, crash_severity
        rng: Random generator to draw from.
        seed: Seed for a new generator when ``rng`` is not given.

    Returns:
        PricePath (normal, crash) or AssetBundle (correlated).

    Raises:
        ValueError: If ``kind`` is not a known scenario kind.
    """
    rng = resolve_rng(rng, seed)
    days = params["days"]
    volatility = params.get("volatility", 0.02)

    if kind == "normal":
        if params.get("include_outliers", False):
            volatility *= OUTLIER_VOLATILITY_MULTIPLIER
        return generate_random_walk(
            days, params.get("initial_value", 100.0), volatility, rng=rng
        )
    if kind == "correlated":
        return generate_correlated_assets(
            days,
            params.get("num_assets", 5),
            volatility,
            params.get("correlation_strength", 0.7),
            rng=rng,
        )
    if kind == "crash":
        return generate_crash_scenario(
            days,
            params.get("initial_value", 100.0),
            params.get("crash_day", 50),
            params.get("crash_severity", 0.15),
            volatility,
            rng=rng,
        )

    raise ValueError(
        f"Unknown scenario kind '{kind}'. Expected one of: {', '.join(SCENARIO_KINDS)}"
    )


@dataclass(frozen=True)
class MarketRun:
    """A price path, the SMA backtest run on it, and the backtest's risk metrics."""
    prices: pd.Series
    backtest: BacktestResult
    metrics: RiskMetrics


@dataclass(frozen=True)
class BacktestComparison:
    """
    Normal-market vs stress-market backtest of the same SMA strategy.

    Attributes:
        normal: Run on a random walk (volatility 0.015).
        stress: Run on a crash path, or None when stress tests were not requested.
    """
    normal: MarketRun
    stress: MarketRun | None = None

    def metrics_table(self) -> pd.DataFrame:
        """One row per metric, one column per market."""
        columns = {'normal': self.normal.metrics.to_dict()}
        if self.stress is not None:
            columns['stress'] = self.stress.metrics.to_dict()
        return pd.DataFrame(columns)


def _run_market(prices: pd.Series, short_period: int, long_period: int) -> MarketRun:
    backtest = backtest_sma(prices, short_period, long_period)
    return MarketRun(
        prices=prices,
        backtest=backtest,
        metrics=calculate_risk_metrics(backtest.returns),
    )


def run_backtest_comparison(
    time_horizon: int,
    short_period: int = 10,
    long_period: int = 50,
    include_stress_tests: bool = False,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> BacktestComparison:
    """
    Backtest an SMA crossover strategy on a normal and, optionally, a crash market.

    **Markets**:
      - normal: random walk from 100 with volatility 0.015.
      - stress: crash path from 100 crashing 25% at floor(0.6 * time_horizon)
        with the default 0.02 volatility.

    Callers are expected to have validated ``short_period < long_period`` and,
    when stress tests are on, that the crash window fits in the horizon.

    Returns:
        BacktestComparison with prices, backtest, and metrics per market.
    """
    rng = resolve_rng(rng, seed)

    normal_prices = generate_random_walk(
        time_horizon, 100.0, BACKTEST_NORMAL_VOLATILITY, rng=rng
    )
    normal = _run_market(normal_prices, short_period, long_period)

    stress = None
    if include_stress_tests:
        crash_day = math.floor(time_horizon * BACKTEST_STRESS_CRASH_FRACTION)
        stress_prices = generate_crash_scenario(
            time_horizon, 100.0, crash_day, BACKTEST_STRESS_SEVERITY, rng=rng
        )
        stress = _run_market(stress_prices, short_period, long_period)

    logger.info(
        "SMA(%d,%d) comparison over %d days: normal sharpe=%s%s",
        short_period, long_period, time_horizon, normal.metrics.sharpe_ratio,
        f", stress sharpe={stress.metrics.sharpe_ratio}" if stress else "",
    )
    return BacktestComparison(normal=normal, stress=stress)


@dataclass(frozen=True)
class RiskDashboard:
    """
    Multi-scenario risk summary.

    Attributes:
        scenario_volatilities: Per-step volatility of each ladder scenario.
        scenario_metrics: RiskMetrics of each ladder scenario's daily returns.
        crash_metrics: RiskMetrics of the crash path's daily returns.
        return_histogram: Histogram of all ladder returns pooled (x, count).
        var_table: Pooled VaR at 90/95/99% confidence (confidence, var).
        scenarios: The ladder price paths.
        crash_prices: The crash price path.
    """
    scenario_volatilities: list[float]
    scenario_metrics: list[RiskMetrics]
    crash_metrics: RiskMetrics
    return_histogram: pd.DataFrame
    var_table: pd.DataFrame
    scenarios: list[pd.Series] = field(default_factory=list)
    crash_prices: pd.Series | None = None

    def metrics_frame(self) -> pd.DataFrame:
        """Ladder metrics, one row per scenario, with its volatility input."""
        frame = pd.DataFrame([m.to_dict() for m in self.scenario_metrics])
        frame.insert(0, 'input_volatility', self.scenario_volatilities)
        frame.index = [f"Scenario {i + 1}" for i in range(len(frame))]
        return frame

    def stress_comparison(self) -> pd.DataFrame:
        """
        Compare the calmest ladder scenario against the crash scenario.

        Drawdown and VaR are expressed in percent; volatility, Sharpe and
        Sortino as-is.
        """
        normal = self.scenario_metrics[0]
        stress = self.crash_metrics
        rows = [
            ('Volatility', normal.volatility, stress.volatility),
            ('Sharpe Ratio', normal.sharpe_ratio, stress.sharpe_ratio),
            ('Max Drawdown', normal.max_drawdown * 100, stress.max_drawdown * 100),
            ('VaR (95%)', normal.value_at_risk * 100, stress.value_at_risk * 100),
            ('Sortino Ratio', normal.sortino_ratio, stress.sortino_ratio),
        ]
        return pd.DataFrame(rows, columns=['name', 'normal', 'stress']).set_index('name')

    def risk_profile(self) -> pd.DataFrame:
        """
        Calm-market risk relative to the crash scenario.

        Each row scales the calmest ladder scenario's metric to a percent of
        the crash scenario's value, so 'stress' is always 100. A zero crash
        value yields inf or NaN.
        """
        normal = self.scenario_metrics[0]
        stress = self.crash_metrics
        rows = [
            ('Volatility', normal.volatility, stress.volatility),
            ('Max Drawdown', normal.max_drawdown, stress.max_drawdown),
            ('Value at Risk', normal.value_at_risk, stress.value_at_risk),
        ]
        profile = [
            (name, ieee_divide(normal_value, stress_value) * 100, 100.0)
            for name, normal_value, stress_value in rows
        ]
        return pd.DataFrame(profile, columns=['name', 'normal', 'stress']).set_index('name')


def run_risk_dashboard(
    num_scenarios: int = 10,
    scenario_length: int = 252,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> RiskDashboard:
    """
    Score a ladder of random-walk scenarios and a crash scenario.

    **Scenarios**:
      - Ladder: for i in 0..num_scenarios-1, a random walk from 100 with
        volatility 0.01 + (i / num_scenarios) * 0.03.
      - Crash: crash path from 100, crash at day 120, severity 0.3,
        volatility 0.02.

    Each scenario is scored on the daily returns of its prices (not on a
    backtest), so metrics describe the asset itself.

    Callers must pick ``scenario_length >= 125`` so the crash window fits.

    Returns:
        RiskDashboard with per-scenario metrics and pooled distributions.
    """
    rng = resolve_rng(rng, seed)

    volatilities = [
        DASHBOARD_BASE_VOLATILITY + (i / num_scenarios) * DASHBOARD_VOLATILITY_SPAN
        for i in range(num_scenarios)
    ]
    scenarios = [
        generate_random_walk(scenario_length, 100.0, vol, rng=rng) for vol in volatilities
    ]
    crash_prices = generate_crash_scenario(
        scenario_length, 100.0, DASHBOARD_CRASH_DAY, DASHBOARD_CRASH_SEVERITY, rng=rng
    )

    scenario_returns = [calculate_daily_returns(prices) for prices in scenarios]
    crash_returns = calculate_daily_returns(crash_prices)

    scenario_metrics = [calculate_risk_metrics(r) for r in scenario_returns]
    crash_metrics = calculate_risk_metrics(crash_returns)

    pooled = pd.concat(scenario_returns, ignore_index=True)

    logger.info(
        "risk dashboard: %d scenarios x %d days, crash max drawdown=%s",
        num_scenarios, scenario_length, crash_metrics.max_drawdown,
    )
    return RiskDashboard(
        scenario_volatilities=volatilities,
        scenario_metrics=scenario_metrics,
        crash_metrics=crash_metrics,
        return_histogram=compute_return_histogram(pooled, DASHBOARD_HISTOGRAM_BINS),
        var_table=calculate_var_table(pooled),
        scenarios=scenarios,
        crash_prices=crash_prices,
    )


def run_market_overview(
    days: int = 180,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> pd.DataFrame:
    """
    Generate a normal and a stress market side by side.

    Normal: random walk from 100 with volatility 0.015. Stress: crash path
    from 100 crashing 25% on day 90. Requires ``days >= 95``.

    Returns:
        DataFrame indexed by day with columns 'normal' and 'stress'.
    """
    rng = resolve_rng(rng, seed)

    normal = generate_random_walk(days, 100.0, OVERVIEW_NORMAL_VOLATILITY, rng=rng)
    stress = generate_crash_scenario(
        days, 100.0, OVERVIEW_CRASH_DAY, OVERVIEW_CRASH_SEVERITY, rng=rng
    )
    return pd.DataFrame({'normal': normal, 'stress': stress})
