"""
Tests for src/orchestration/scenarios.py

**Purpose**: Verify that the workflows chain the generators, backtester, and
risk calculator with the documented scenario parameters, and that a seeded
run is reproducible end to end.
"""

import numpy as np
import pandas as pd
import pytest

from src.analytics.risk_metrics import RiskMetrics
from src.analytics.synthetic_data import generate_crash_scenario, generate_random_walk
from src.orchestration.scenarios import (
    BacktestComparison,
    generate_scenario,
    run_backtest_comparison,
    run_market_overview,
    run_risk_dashboard,
)


def test_generate_scenario_normal_matches_random_walk():
    prices = generate_scenario("normal", {"days": 60, "volatility": 0.02}, seed=5)

    pd.testing.assert_series_equal(prices, generate_random_walk(60, 100.0, 0.02, seed=5))


def test_generate_scenario_outliers_widen_volatility():
    """Test that include_outliers multiplies volatility by 1.5."""
    prices = generate_scenario(
        "normal", {"days": 60, "volatility": 0.02, "include_outliers": True}, seed=5
    )

    expected = generate_random_walk(60, 100.0, 0.02 * 1.5, seed=5)
    pd.testing.assert_series_equal(prices, expected)


def test_generate_scenario_correlated_returns_bundle():
    bundle = generate_scenario(
        "correlated", {"days": 40, "num_assets": 3, "correlation_strength": 0.5}, seed=1
    )

    assert isinstance(bundle, pd.DataFrame)
    assert bundle.shape == (40, 3)


def test_generate_scenario_crash_matches_generator():
    params = {"days": 100, "crash_day": 50, "crash_severity": 0.2, "volatility": 0.01}
    prices = generate_scenario("crash", params, seed=3)

    pd.testing.assert_series_equal(
        prices, generate_crash_scenario(100, 100.0, 50, 0.2, 0.01, seed=3)
    )


def test_generate_scenario_unknown_kind():
    with pytest.raises(ValueError, match="Unknown scenario kind"):
        generate_scenario("sideways", {"days": 10})


def test_run_backtest_comparison_without_stress():
    comparison = run_backtest_comparison(180, 10, 50, seed=42)

    assert isinstance(comparison, BacktestComparison)
    assert comparison.stress is None
    assert len(comparison.normal.prices) == 180
    assert isinstance(comparison.normal.metrics, RiskMetrics)
    assert list(comparison.metrics_table().columns) == ['normal']


def test_run_backtest_comparison_with_stress():
    comparison = run_backtest_comparison(180, 10, 50, include_stress_tests=True, seed=42)

    assert comparison.stress is not None
    assert len(comparison.stress.prices) == 180
    table = comparison.metrics_table()
    assert list(table.columns) == ['normal', 'stress']
    assert list(table.index) == [
        'volatility', 'sharpe_ratio', 'max_drawdown', 'sortino_ratio', 'value_at_risk'
    ]


def test_run_backtest_comparison_stress_market_crashes():
    """Test that the stress market loses 25% over days 108..112 of 180."""
    comparison = run_backtest_comparison(180, 10, 50, include_stress_tests=True, seed=0)
    prices = comparison.stress.prices

    assert prices.iloc[112] <= prices.iloc[107] * 0.75 + 5 * 0.005


def test_run_backtest_comparison_reproducible():
    first = run_backtest_comparison(120, 5, 20, include_stress_tests=True, seed=9)
    second = run_backtest_comparison(120, 5, 20, include_stress_tests=True, seed=9)

    pd.testing.assert_frame_equal(first.metrics_table(), second.metrics_table())
    pd.testing.assert_series_equal(first.normal.prices, second.normal.prices)


def test_run_risk_dashboard_volatility_ladder():
    dashboard = run_risk_dashboard(num_scenarios=3, scenario_length=252, seed=1)

    assert np.allclose(dashboard.scenario_volatilities, [0.01, 0.02, 0.03])
    assert len(dashboard.scenario_metrics) == 3
    assert len(dashboard.scenarios) == 3
    assert all(len(prices) == 252 for prices in dashboard.scenarios)


def test_run_risk_dashboard_pooled_distributions():
    dashboard = run_risk_dashboard(num_scenarios=3, scenario_length=252, seed=1)

    # 3 scenarios x 251 daily returns, all binned
    assert len(dashboard.return_histogram) == 30
    assert dashboard.return_histogram['count'].sum() == 3 * 251
    assert dashboard.var_table['confidence'].tolist() == ['90%', '95%', '99%']


def test_run_risk_dashboard_crash_drawdown():
    """Test that the 30% crash shows up in the crash scenario's drawdown."""
    dashboard = run_risk_dashboard(num_scenarios=2, scenario_length=252, seed=4)

    assert dashboard.crash_metrics.max_drawdown >= 0.29


def test_run_risk_dashboard_frames():
    dashboard = run_risk_dashboard(num_scenarios=2, scenario_length=150, seed=2)

    metrics = dashboard.metrics_frame()
    assert list(metrics.index) == ['Scenario 1', 'Scenario 2']
    assert metrics.columns[0] == 'input_volatility'

    comparison = dashboard.stress_comparison()
    assert list(comparison.columns) == ['normal', 'stress']
    assert list(comparison.index) == [
        'Volatility', 'Sharpe Ratio', 'Max Drawdown', 'VaR (95%)', 'Sortino Ratio'
    ]
    assert comparison.loc['Max Drawdown', 'stress'] == pytest.approx(
        dashboard.crash_metrics.max_drawdown * 100
    )
    assert comparison.loc['Sortino Ratio', 'normal'] == (
        dashboard.scenario_metrics[0].sortino_ratio
    )


def test_run_risk_dashboard_risk_profile():
    """Test calm-market metrics expressed as a percent of the crash scenario."""
    dashboard = run_risk_dashboard(num_scenarios=2, scenario_length=252, seed=1)
    normal = dashboard.scenario_metrics[0]
    crash = dashboard.crash_metrics

    profile = dashboard.risk_profile()

    assert list(profile.index) == ['Volatility', 'Max Drawdown', 'Value at Risk']
    assert (profile['stress'] == 100.0).all()
    assert profile.loc['Volatility', 'normal'] == pytest.approx(
        normal.volatility / crash.volatility * 100
    )
    # The 30% crash dwarfs the calm scenario's drawdown
    assert profile.loc['Max Drawdown', 'normal'] < 100.0


def test_run_market_overview_shape():
    overview = run_market_overview(180, seed=3)

    assert overview.shape == (180, 2)
    assert list(overview.columns) == ['normal', 'stress']
    assert (overview.iloc[0] == 100.0).all()
