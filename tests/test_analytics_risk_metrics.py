"""
Tests for src/analytics/risk_metrics.py

These tests use hand-crafted return series where expected values are easy to
verify qualitatively and numerically.
"""

import math

import numpy as np
import pandas as pd
import pytest

from src.analytics.risk_metrics import (
    RiskMetrics,
    calculate_cumulative_returns,
    calculate_max_drawdown,
    calculate_risk_metrics,
    calculate_value_at_risk,
    calculate_var_table,
    compute_return_histogram,
)

# Mixed returns with one flat day: non-zero set is [0.01, -0.02, 0.03, -0.01]
MIXED_RETURNS = [0.01, -0.02, 0.03, 0.0, -0.01]


def test_calculate_cumulative_returns_empty():
    """Test that no returns leave the initial capital untouched."""
    assert calculate_cumulative_returns([]).tolist() == [1.0]


def test_calculate_cumulative_returns_zeros():
    """Test that zero returns give a flat curve one longer than the input."""
    assert calculate_cumulative_returns([0, 0, 0]).tolist() == [1.0, 1.0, 1.0, 1.0]


def test_calculate_cumulative_returns_compounds():
    """Test compounding: +10% then -50% → 1.1 → 0.55."""
    curve = calculate_cumulative_returns(pd.Series([0.10, -0.50]))

    assert np.allclose(curve, [1.0, 1.1, 0.55])


def test_calculate_max_drawdown_monotonic_increase():
    """Test that a curve that never declines has no drawdown."""
    assert calculate_max_drawdown([0.01] * 20) == 0.0


def test_calculate_max_drawdown_simple_case():
    """Test drawdown after a peak: 1 → 1.1 → 0.55 is a 50% drawdown."""
    assert np.isclose(calculate_max_drawdown([0.10, -0.50]), 0.5)


def test_calculate_risk_metrics_all_zero_returns():
    """Test the all-zero fallback for flat-only series."""
    metrics = calculate_risk_metrics([0.0] * 30)

    assert metrics == RiskMetrics(0.0, 0.0, 0.0, 0.0, 0.0)
    assert metrics.to_dict() == {
        'volatility': 0.0,
        'sharpe_ratio': 0.0,
        'max_drawdown': 0.0,
        'sortino_ratio': 0.0,
        'value_at_risk': 0.0,
    }


def test_calculate_risk_metrics_empty_returns():
    """Test the fallback for an empty series."""
    assert calculate_risk_metrics([]) == RiskMetrics.zero()


def test_calculate_risk_metrics_constant_positive_returns():
    """Test constant +1% daily returns: no drawdown, no volatility."""
    metrics = calculate_risk_metrics([0.01] * 50)

    assert metrics.max_drawdown == 0.0
    assert metrics.volatility == 0.0
    # Positive annualized return over (numerically) zero volatility
    assert metrics.sharpe_ratio > 1e6
    # No negative returns: downside deviation floors at 1e-5, so Sortino is finite
    assert math.isfinite(metrics.sortino_ratio)
    assert metrics.sortino_ratio > 0
    assert metrics.value_at_risk == 0.01


def test_calculate_risk_metrics_exact_zero_volatility_gives_inf_sharpe():
    """Test that an exactly zero denominator yields inf rather than raising."""
    # 0.25 is exact in binary, so the mean and variance are exact too
    metrics = calculate_risk_metrics([0.25] * 8)

    assert metrics.volatility == 0.0
    assert math.isinf(metrics.sharpe_ratio) and metrics.sharpe_ratio > 0


def test_calculate_risk_metrics_hand_computed_values():
    """Test each field against a hand computation on MIXED_RETURNS."""
    metrics = calculate_risk_metrics(MIXED_RETURNS)

    active = np.array([0.01, -0.02, 0.03, -0.01])
    mean = active.mean()  # 0.0025
    variance = ((active - mean) ** 2).mean()  # population variance
    annualized_return = (1 + mean) ** 252 - 1
    annualized_vol = math.sqrt(variance) * math.sqrt(252)
    downside = math.sqrt((0.02 ** 2 + 0.01 ** 2) / 2)

    assert metrics.volatility == pytest.approx(0.3048, abs=1e-4)
    assert metrics.volatility == round(annualized_vol, 4)
    assert metrics.sharpe_ratio == round(annualized_return / annualized_vol, 4)
    assert metrics.sortino_ratio == pytest.approx(
        annualized_return / (downside * math.sqrt(252)), abs=1e-4
    )
    # Peak 1.01, trough 0.9898 → (1.01 - 0.9898) / 1.01 = 2%
    assert metrics.max_drawdown == 0.02
    # Sorted [-0.02, -0.01, 0.01, 0.03], index floor(0.05 * 4) = 0
    assert metrics.value_at_risk == 0.02


def test_calculate_risk_metrics_max_drawdown_uses_unfiltered_returns():
    """Test that zero days still count in the drawdown curve (they are flat)."""
    with_zeros = calculate_risk_metrics([0.05, 0.0, 0.0, -0.10, 0.0, 0.02])
    without_zeros = calculate_risk_metrics([0.05, -0.10, 0.02])

    # Zeros don't move a compounded curve, so both drawdowns match
    assert with_zeros.max_drawdown == without_zeros.max_drawdown == 0.1


def test_calculate_risk_metrics_negative_mean_gives_negative_ratios():
    """Test that losing strategies have negative Sharpe and Sortino."""
    metrics = calculate_risk_metrics([-0.01, -0.02, 0.005, -0.015, 0.002])

    assert metrics.sharpe_ratio < 0
    assert metrics.sortino_ratio < 0
    assert metrics.max_drawdown > 0


def test_calculate_risk_metrics_single_return_does_not_raise():
    """Test zero variance with a single non-zero return (inf Sharpe, no error)."""
    metrics = calculate_risk_metrics([0.0, 0.0, 0.02])

    assert math.isinf(metrics.sharpe_ratio)
    assert metrics.volatility == 0.0


def test_calculate_risk_metrics_rounded_to_four_decimals():
    """Test that every reported field has at most four decimals."""
    rng = np.random.default_rng(0)
    metrics = calculate_risk_metrics(rng.normal(0.0005, 0.01, 300))

    for value in metrics.to_dict().values():
        assert value == round(value, 4)


def test_calculate_value_at_risk_empirical_index():
    """Test non-interpolated VaR on returns -0.50..0.49 (100 values)."""
    returns = np.arange(-50, 50) / 100

    # floor(0.05 * 100) = 5 → sorted[5] = -0.45
    assert calculate_value_at_risk(returns, 0.95) == pytest.approx(0.45)


def test_calculate_value_at_risk_empty():
    """Test the empty-sample fallback."""
    assert calculate_value_at_risk([], 0.95) == 0.0


def test_calculate_var_table_levels():
    """Test the VaR table layout and that VaR grows with confidence."""
    rng = np.random.default_rng(1)
    table = calculate_var_table(rng.normal(0, 0.02, 1000))

    assert list(table.columns) == ['confidence', 'var']
    assert table['confidence'].tolist() == ['90%', '95%', '99%']
    assert table['var'].is_monotonic_increasing


def test_compute_return_histogram_simple_case():
    """Test equal-width bins with the max value in the last bin."""
    histogram = compute_return_histogram([0.0, 1.0, 2.0, 3.0, 4.0], bins=4)

    assert np.allclose(histogram['x'], [0.5, 1.5, 2.5, 3.5])
    assert histogram['count'].tolist() == [1, 1, 1, 2]


def test_compute_return_histogram_counts_every_value():
    """Test that no value is lost between bins."""
    rng = np.random.default_rng(2)
    values = rng.normal(0, 0.01, 500)
    histogram = compute_return_histogram(values, bins=30)

    assert len(histogram) == 30
    assert histogram['count'].sum() == 500


def test_compute_return_histogram_constant_values():
    """Test that identical values all fall into the first bin."""
    histogram = compute_return_histogram([0.01] * 7, bins=5)

    assert histogram['count'].tolist() == [7, 0, 0, 0, 0]


def test_compute_return_histogram_empty():
    """Test the empty-input fallback."""
    assert compute_return_histogram([]).empty


@pytest.mark.parametrize("returns", [[20.0], [20.0, 0.0]])
def test_calculate_risk_metrics_overflowing_annual_return_gives_inf(returns):
    """Test that (1 + mean)^252 past the float range yields inf, not OverflowError."""
    metrics = calculate_risk_metrics(returns)

    assert math.isinf(metrics.sharpe_ratio) and metrics.sharpe_ratio > 0
    assert math.isinf(metrics.sortino_ratio) and metrics.sortino_ratio > 0
    assert metrics.value_at_risk == 20.0


def test_calculate_value_at_risk_confidence_out_of_range():
    """Test that confidence outside (0, 1] reads the sample ends instead of raising."""
    returns = [-0.03, -0.01, 0.02, 0.04]

    # floor(1.0 * 4) = 4 would be one past the end → clamped to the maximum
    assert calculate_value_at_risk(returns, 0.0) == 0.04
    # floor(-0.5 * 4) = -2 would wrap around → clamped to the minimum
    assert calculate_value_at_risk(returns, 1.5) == 0.03


def test_calculate_var_table_accepts_caller_levels():
    table = calculate_var_table([-0.03, -0.01, 0.02, 0.04], levels=(0.0, 1.0))

    assert table['var'].tolist() == [0.04, 0.03]
