"""
Mathematical primitives shared by the generators, backtester, and risk metrics.

This module provides small, well-documented building blocks: fixed-precision
rounding, daily simple returns from a price path, and the simple moving average
used by the SMA crossover backtester.

The moving average is represented as a sequence of tagged points
(``SmaPoint``) rather than a float series with NaN holes, so that the
"not enough history yet" state is explicit and has to be handled by the
consumer instead of silently propagating through comparisons.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Sequence

import numpy as np
import pandas as pd

# Decimal places kept on every generated or averaged price.
PRICE_DECIMALS = 2


def to_float_array(values: Sequence[float] | np.ndarray | pd.Series) -> np.ndarray:
    """Convert a list, numpy array, or pandas Series into a 1-D float array."""
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype=float)
    return np.asarray(values, dtype=float).reshape(-1)


def round_half_up(value: float, decimals: int) -> float:
    """
    Round the exact binary value of a float half away from zero.

    Builtin ``round`` sends exact ties to the even neighbour; this sends them
    away from zero, so 100.125 (exactly representable) becomes 100.13. A
    decimal-looking tie such as 1.005 is stored as 1.00499999... and still
    rounds down to 1.0.

    inf, NaN and magnitudes of 2**52 or more (already whole numbers) are
    returned unchanged.
    """
    value = float(value)
    if not math.isfinite(value) or abs(value) >= 2.0 ** 52:
        return value
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_price(value: float) -> float:
    """
    Round a price to the fixed two-decimal precision used across the engine.

    **Conceptual**: Every generated price and every SMA value is stored with
    two decimals, like a quoted price. The rounding happens at each step, so it
    feeds back into subsequent compounding: a path built with full float
    precision will drift away from one built with per-step rounding.

    Args:
        value: Unrounded price.

    Returns:
        Price rounded half-up to PRICE_DECIMALS decimal places, as a Python float.
    """
    return round_half_up(value, PRICE_DECIMALS)


def calculate_daily_returns(prices: Sequence[float] | np.ndarray | pd.Series) -> pd.Series:
    """
    Convert a price path into daily simple returns.

    **Mathematical**: For each day i >= 1:
        r_i = (P_i / P_{i-1}) - 1

    **Functionally**:
    - Input: price path in chronological order (oldest first).
    - Output: pandas Series of length len(prices) - 1, indexed 1..n-1 so each
      return sits on the day it was realized.
    - Unlike a backtest ReturnSeries, there is no leading 0: this is the raw
      day-over-day change of the asset itself, used when scoring a generated
      path directly with the risk calculator.

    **Edge cases**:
    - Empty or single-price input → empty Series.

    Args:
        prices: Price path (must be positive).

    Returns:
        Series of daily returns named 'return'.
    """
    values = to_float_array(prices)
    if len(values) < 2:
        return pd.Series([], dtype=float, name='return')

    returns = values[1:] / values[:-1] - 1.0
    return pd.Series(returns, index=range(1, len(values)), name='return')


class SmaStatus(Enum):
    """Whether a moving-average point has enough history to be defined."""

    DEFINED = "defined"
    INSUFFICIENT_HISTORY = "insufficient_history"


@dataclass(frozen=True)
class SmaPoint:
    """
    One element of a simple moving average.

    Attributes:
        status: DEFINED once the window is full, INSUFFICIENT_HISTORY before.
        value: The rounded average when defined; NaN otherwise.
    """
    status: SmaStatus
    value: float = float("nan")

    @property
    def is_defined(self) -> bool:
        return self.status is SmaStatus.DEFINED

    @classmethod
    def defined(cls, value: float) -> "SmaPoint":
        return cls(status=SmaStatus.DEFINED, value=value)

    @classmethod
    def insufficient(cls) -> "SmaPoint":
        return cls(status=SmaStatus.INSUFFICIENT_HISTORY)


def calculate_sma(
    prices: Sequence[float] | np.ndarray | pd.Series,
    period: int,
) -> list[SmaPoint]:
    """
    Compute a simple moving average (SMA) as a list of tagged points.

    **Conceptual**: A simple moving average smooths short-term fluctuations by
    averaging the most recent N prices with equal weight. Crossovers between a
    fast and a slow SMA are the classic trend-following entry/exit signal.

    **Mathematical**: For i >= period - 1:
        SMA_i = round2( (1 / period) * Σ P_{i-k} for k = 0..period-1 )

    **Functionally**:
    - Output has the same length as ``prices``.
    - The first (period - 1) points are INSUFFICIENT_HISTORY.
    - Each defined value is rounded to two decimals.
    - The window sum is accumulated oldest-to-newest, one price at a time.

    **Edge cases**:
    - period = 1 → every point is defined and equals the (rounded) price.
    - len(prices) < period → every point is INSUFFICIENT_HISTORY.

    Args:
        prices: Price path in chronological order.
        period: Window length in days (>= 1).

    Returns:
        List of SmaPoint, same length as prices.
    """
    values = to_float_array(prices).tolist()
    points = [SmaPoint.insufficient() for _ in range(min(period - 1, len(values)))]

    for i in range(period - 1, len(values)):
        window_sum = sum(values[i - period + 1:i + 1])
        points.append(SmaPoint.defined(round_price(window_sum / period)))

    return points


def sma_to_series(points: Sequence[SmaPoint], index=None) -> pd.Series:
    """
    Render tagged SMA points as a float Series with NaN for missing history.

    Handy for reporting and plotting, where NaN gaps are the natural encoding.
    """
    data = [p.value if p.is_defined else np.nan for p in points]
    return pd.Series(data, index=index, dtype=float, name='sma')
