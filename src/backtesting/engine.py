"""
SMA crossover backtest engine for synthetic price paths.

**Conceptual**: The backtest engine turns a price path into a trading record.
It runs a long-only moving-average crossover strategy: go long when the fast
SMA crosses above the slow SMA (bullish crossover), go flat when it crosses
back below (bearish crossover). The output is a position series and the daily
return the strategy earned, ready for the risk metrics calculator.

**Why so simple?**
  - Synthetic scenarios are the point: the same strategy is run on a normal
    market and on a crash market, and the risk metrics are compared.
  - No costs, no sizing, no shorting: a position is either 0 (cash) or 1
    (fully invested), so returns are simply the asset's return while long.

**Time alignment**: The decision on day i uses the SMA values of days i-1 and
i (both computed from prices up to day i), and the return credited on day i
is P_i / P_{i-1} - 1 if the position recorded on day i is long. Evaluation
starts at index ``long_period``, the first day on which both SMAs also have a
defined value on the previous day.

**Preconditions** (checked by callers via ``src.config.validation``, not here):
  - 1 <= short_period < long_period
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from src.utils.math import SmaPoint, calculate_sma, to_float_array

logger = logging.getLogger(__name__)

FLAT = 0
LONG = 1


@dataclass(frozen=True)
class BacktestResult:
    """
    Results from an SMA crossover backtest.

    Attributes:
        returns: ReturnSeries, same length and index as the prices. Zero on
                 every day the strategy was flat and before the long window.
        positions: PositionSeries of 0 (flat) / 1 (long), same length and
                   index as the prices.
        short_period: Fast SMA window used.
        long_period: Slow SMA window used.
    """
    returns: pd.Series
    positions: pd.Series
    short_period: int
    long_period: int

    @property
    def num_trades(self) -> int:
        """Number of position changes (entries plus exits)."""
        return int(self.positions.diff().fillna(0).abs().sum())


def _crossover_signal(
    prev_short: SmaPoint,
    prev_long: SmaPoint,
    short: SmaPoint,
    long: SmaPoint,
    position: int,
) -> int:
    """
    Decide the next position from two consecutive SMA pairs.

    Equality at the boundary favors no change: a touch without a cross (e.g.
    prev_short == prev_long and short == long) keeps the current position.
    Any point without full history also keeps the current position.
    """
    if not (prev_short.is_defined and prev_long.is_defined
            and short.is_defined and long.is_defined):
        return position

    # Bullish crossover: fast SMA moves from at/below to strictly above
    if prev_short.value <= prev_long.value and short.value > long.value:
        return LONG
    # Bearish crossover: fast SMA moves from at/above to strictly below
    if prev_short.value >= prev_long.value and short.value < long.value:
        return FLAT
    return position


def backtest_sma(
    prices: Sequence[float] | np.ndarray | pd.Series,
    short_period: int = 10,
    long_period: int = 50,
) -> BacktestResult:
    """
    Run a long-only SMA crossover strategy over a price path.

    **Conceptual**: This is the main entrypoint for backtesting. It:
      1. Computes the short and long SMA as tagged points.
      2. Starts flat and walks forward from index ``long_period``.
      3. At each step applies the crossover rule and records the position.
      4. Credits the day's price return when long, 0 otherwise.

    **Mathematical**: With position_i decided on day i:
        return_i = (P_i / P_{i-1} - 1) if position_i == 1 else 0
    Indices < long_period have position 0 and return 0.

    **Teaching note**: Because positions are recorded on the day the crossover
    is observed and the same day's return is credited, this is an
    optimistic (same-bar) fill convention. It is kept deliberately so the
    results match the scenario dashboard's reference behavior.

    Args:
        prices: PricePath in chronological order. Index is preserved when a
                pandas Series is given.
        short_period: Fast SMA window (default 10).
        long_period: Slow SMA window (default 50).

    Returns:
        BacktestResult with returns and positions aligned to prices.
    """
    values = to_float_array(prices)
    index = prices.index if isinstance(prices, pd.Series) else range(len(values))

    short_sma = calculate_sma(values, short_period)
    long_sma = calculate_sma(values, long_period)

    positions = np.zeros(len(values), dtype=int)
    returns = np.zeros(len(values), dtype=float)

    position = FLAT
    for i in range(long_period, len(values)):
        position = _crossover_signal(
            short_sma[i - 1], long_sma[i - 1], short_sma[i], long_sma[i], position
        )
        positions[i] = position

        if position == LONG:
            returns[i] = values[i] / values[i - 1] - 1.0

    result = BacktestResult(
        returns=pd.Series(returns, index=index, name='return'),
        positions=pd.Series(positions, index=index, name='position'),
        short_period=short_period,
        long_period=long_period,
    )
    logger.debug(
        "SMA(%d,%d) backtest: %d days, %d position changes, %d days long",
        short_period, long_period, len(values), result.num_trades, int(positions.sum()),
    )
    return result
