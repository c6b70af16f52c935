"""
Risk and performance metrics for strategy and scenario evaluation.

This module derives a fixed set of risk statistics from a daily return series:
  - Annualized volatility
  - Sharpe ratio (risk-free rate 0)
  - Maximum drawdown of the compounded return curve
  - Sortino ratio (downside deviation in place of volatility)
  - Empirical 95% Value-at-Risk

plus supporting helpers for the risk dashboard: the cumulative return curve,
VaR at arbitrary confidence levels, and a return histogram.

**Zero returns**: a backtest ReturnSeries holds exact zeros on every day the
strategy was flat. Those are "no position" days, not trading days that
happened to return nothing, so distributional statistics are computed over
the non-zero returns only. Max drawdown is the exception: it compounds the
original, unfiltered series.

**Degenerate inputs**: nothing here raises for degenerate numerics. An empty
(or all-zero) series yields all-zero metrics; a zero denominator yields inf
or NaN following IEEE float division.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from src.utils.math import round_half_up, to_float_array

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252

# Decimal places of every reported metric.
METRIC_DECIMALS = 4

# Substituted downside deviation when there are no negative returns.
DOWNSIDE_DEVIATION_FLOOR = 0.00001

DEFAULT_VAR_CONFIDENCE = 0.95
DEFAULT_VAR_LEVELS = (0.90, 0.95, 0.99)


@dataclass(frozen=True)
class RiskMetrics:
    """
    The five headline risk statistics of a return series.

    All values are rounded to 4 decimal places.

    Attributes:
        volatility: Annualized volatility (population std * sqrt(252)).
        sharpe_ratio: Annualized return / annualized volatility.
        max_drawdown: Worst peak-to-trough loss of the cumulative curve, as a
                      positive fraction (0.25 = 25% drawdown).
        sortino_ratio: Annualized return / annualized downside deviation.
        value_at_risk: Empirical one-day 95% VaR, as a positive loss magnitude.
    """
    volatility: float
    sharpe_ratio: float
    max_drawdown: float
    sortino_ratio: float
    value_at_risk: float

    @classmethod
    def zero(cls) -> "RiskMetrics":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def _round_metric(value: float) -> float:
    return round_half_up(value, METRIC_DECIMALS)


def ieee_divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE semantics: x/0 → ±inf, 0/0 → NaN, without raising or warning."""
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(numerator) / np.float64(denominator))


def _annualize_return(mean_daily_return: float) -> float:
    # Overflows to inf instead of raising OverflowError like float **
    with np.errstate(over='ignore', invalid='ignore'):
        growth = np.float64(1.0 + mean_daily_return) ** TRADING_DAYS_PER_YEAR
    return float(growth) - 1.0


def calculate_cumulative_returns(
    returns: Sequence[float] | np.ndarray | pd.Series,
) -> pd.Series:
    """
    Compound a return series into a growth-of-1 curve.

    **Conceptual**: Answers "what is $1 invested at the start worth after each
    day?" The curve starts at 1.0 (100% of initial capital) before the first
    return is applied.

    **Mathematical**:
        cum_0 = 1
        cum_{k+1} = cum_k * (1 + r_k)

    **Functionally**:
    - Output length is len(returns) + 1.
    - Compounding is sequential, one multiplication per step.

    **Edge cases**:
    - Empty input → [1.0].
    - All-zero returns → a flat curve of ones.

    Args:
        returns: Daily fractional returns.

    Returns:
        Series of cumulative growth factors named 'cumulative_return'.
    """
    values = to_float_array(returns)

    curve = [1.0]
    for r in values:
        curve.append(curve[-1] * (1.0 + r))

    return pd.Series(curve, name='cumulative_return')


def calculate_max_drawdown(returns: Sequence[float] | np.ndarray | pd.Series) -> float:
    """
    Compute the maximum drawdown of the compounded return curve.

    **Mathematical**: On the cumulative curve C (see
    ``calculate_cumulative_returns``), track the running peak M_t and
        drawdown_t = (M_t - C_t) / M_t
    The result is max_t drawdown_t, 0 if the curve never declines.

    Note the sign convention: drawdown is reported as a positive loss fraction.

    Args:
        returns: Daily fractional returns (unfiltered).

    Returns:
        Maximum drawdown as a non-negative fraction (not rounded).
    """
    curve = calculate_cumulative_returns(returns).tolist()

    max_drawdown = 0.0
    peak = curve[0]
    for value in curve[1:]:
        if value > peak:
            peak = value
        else:
            drawdown = (peak - value) / peak
            if drawdown > max_drawdown:
                max_drawdown = drawdown

    return max_drawdown


def calculate_value_at_risk(
    returns: Sequence[float] | np.ndarray | pd.Series,
    confidence: float = DEFAULT_VAR_CONFIDENCE,
) -> float:
    """
    Empirical, non-interpolated Value-at-Risk.

    **Mathematical**: Sort the n returns ascending and take
        VaR = | r_(k) |,  k = floor((1 - confidence) * n)
    i.e. the loss magnitude at the (1 - confidence) empirical quantile, read
    straight off the sorted sample without interpolation.

    **Functionally**:
    - No zero filtering is applied here; callers pass the sample they want.
    - Empty input → 0.0.
    - confidence is meant to lie in (0, 1]; values above 1 read the
      sample minimum and values of 0 or below read the sample maximum.

    Args:
        returns: Daily fractional returns.
        confidence: Confidence level, e.g. 0.95.

    Returns:
        VaR as a positive loss magnitude (not rounded).
    """
    values = np.sort(to_float_array(returns))
    if len(values) == 0:
        return 0.0

    index = math.floor((1.0 - confidence) * len(values))
    # confidence outside (0, 1] would index past either end of the sample
    index = min(max(index, 0), len(values) - 1)
    return abs(float(values[index]))


def calculate_risk_metrics(returns: Sequence[float] | np.ndarray | pd.Series) -> RiskMetrics:
    """
    Derive volatility, Sharpe, max drawdown, Sortino and VaR from daily returns.

    **Conceptual**: This is the one-stop risk summary used for every scenario
    and backtest. It annualizes assuming 252 trading days and a zero risk-free
    rate.

    **Mathematical**: Let R be the non-zero returns, n = |R|.
        mean     = Σ R / n
        variance = Σ (R - mean)^2 / n            (population, not n-1)
        σ_ann    = sqrt(variance) * sqrt(252)
        ret_ann  = (1 + mean)^252 - 1
        Sharpe   = ret_ann / σ_ann
        DD       = sqrt( Σ_{r in R, r<0} r^2 / #negatives )   (1e-5 if none)
        Sortino  = ret_ann / (DD * sqrt(252))
        VaR95    = | sort(R)[floor(0.05 * n)] |
    Max drawdown uses the cumulative curve of the full, unfiltered returns.

    **Edge cases**:
    - No non-zero returns → all-zero RiskMetrics.
    - A single non-zero return (or all equal) → σ_ann = 0 → Sharpe is ±inf
      (or NaN when ret_ann is also 0). Not special-cased.

    Args:
        returns: ReturnSeries (e.g. BacktestResult.returns) or daily returns
                 of a price path.

    Returns:
        RiskMetrics with every field rounded to 4 decimals.
    """
    values = to_float_array(returns)
    active = values[values != 0]

    if len(active) == 0:
        logger.debug("risk metrics: no non-zero returns in %d values", len(values))
        return RiskMetrics.zero()

    n = len(active)
    mean = float(np.sum(active)) / n
    variance = float(np.sum((active - mean) ** 2)) / n
    daily_volatility = math.sqrt(variance)

    annualized_volatility = daily_volatility * math.sqrt(TRADING_DAYS_PER_YEAR)
    annualized_return = _annualize_return(mean)

    sharpe_ratio = ieee_divide(annualized_return, annualized_volatility)

    max_drawdown = calculate_max_drawdown(values)

    negative = active[active < 0]
    if len(negative) > 0:
        downside_deviation = math.sqrt(float(np.sum(negative ** 2)) / len(negative))
    else:
        downside_deviation = DOWNSIDE_DEVIATION_FLOOR

    sortino_ratio = ieee_divide(
        annualized_return,
        downside_deviation * math.sqrt(TRADING_DAYS_PER_YEAR),
    )

    value_at_risk = calculate_value_at_risk(active, DEFAULT_VAR_CONFIDENCE)

    metrics = RiskMetrics(
        volatility=_round_metric(annualized_volatility),
        sharpe_ratio=_round_metric(sharpe_ratio),
        max_drawdown=_round_metric(max_drawdown),
        sortino_ratio=_round_metric(sortino_ratio),
        value_at_risk=_round_metric(value_at_risk),
    )
    logger.debug("risk metrics over %d active of %d returns: %s", n, len(values), metrics)
    return metrics


def calculate_var_table(
    returns: Sequence[float] | np.ndarray | pd.Series,
    levels: Sequence[float] = DEFAULT_VAR_LEVELS,
) -> pd.DataFrame:
    """
    Tabulate empirical VaR at several confidence levels.

    Args:
        returns: Daily fractional returns (pooled across scenarios if desired).
        levels: Confidence levels, e.g. (0.90, 0.95, 0.99).

    Returns:
        DataFrame with columns 'confidence' (e.g. "95%") and 'var' (loss
        magnitude as a fraction), one row per level.
    """
    rows = [
        {
            'confidence': f"{level * 100:.0f}%",
            'var': calculate_value_at_risk(returns, level),
        }
        for level in levels
    ]
    return pd.DataFrame(rows, columns=['confidence', 'var'])


def compute_return_histogram(
    returns: Sequence[float] | np.ndarray | pd.Series,
    bins: int = 20,
) -> pd.DataFrame:
    """
    Bin returns into equal-width buckets between their min and max.

    **Functionally**:
    - Bin k covers [min + k*w, min + (k+1)*w) with w = (max - min) / bins;
      values equal to max fall in the last bin.
    - 'x' is the bin centre, 'count' the number of returns in the bin.
    - If every value is identical (w = 0) all of them land in bin 0.
    - Empty input → empty DataFrame.

    Args:
        returns: Daily fractional returns.
        bins: Number of buckets (>= 1).

    Returns:
        DataFrame with columns 'x' and 'count', one row per bin.
    """
    values = to_float_array(returns)
    if len(values) == 0:
        return pd.DataFrame({'x': pd.Series(dtype=float), 'count': pd.Series(dtype=int)})

    low = float(values.min())
    high = float(values.max())
    width = (high - low) / bins

    centres = low + np.arange(bins) * width + width / 2.0
    if width > 0:
        bin_index = np.floor((values - low) / width).astype(int)
    else:
        bin_index = np.zeros(len(values), dtype=int)
    bin_index = np.minimum(bin_index, bins - 1)

    counts = np.bincount(bin_index, minlength=bins)
    return pd.DataFrame({'x': centres, 'count': counts})
