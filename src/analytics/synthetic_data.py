"""
Synthetic market data generators for backtesting and risk modeling.

This module provides functions to generate synthetic price paths under simple
multiplicative-noise scenario models:
  - Random walk: an independent "normal market" path
  - Correlated assets: a bundle of paths sharing a base-asset factor
  - Crash scenario: drift up, a sharp 5-day decline, then recovery

These generators are invaluable for:
  - Feeding the SMA crossover backtester with controlled market regimes
  - Stress-testing risk metrics (a crash path must show a deep drawdown)
  - Teaching: seeing how noise amplitude and bias shape a path

**Randomness**: every generator takes an explicit ``numpy.random.Generator``
(``rng``) or an integer ``seed``. With neither, a fresh unseeded generator is
created. The global numpy random state is never used, so passing the same
seed always reproduces the same path.

**Precision**: each generated price is rounded to 2 decimals as it is produced
(see ``src.utils.math.round_price``). The rounded value is what the next step
compounds from.

**Preconditions** (checked by callers via ``src.config.validation``, not here):
  - days >= 1, initial_value > 0, volatility >= 0
  - for crash scenarios: 1 <= crash_day and crash_day + 5 <= days

**Known limitation**: with volatility >= 2 the symmetric walk can draw a change
of -100% or worse, producing zero or negative prices. Such inputs are outside
the intended range and are not clamped.
"""

import logging

import numpy as np
import pandas as pd

from src.utils.math import round_price

logger = logging.getLogger(__name__)

# Number of consecutive decline days in a crash scenario.
CRASH_LENGTH = 5

# Upper bound of the extra uniform noise added to each crash day's decline.
CRASH_EXTRA_NOISE = 0.02

# Noise offsets: (u - offset) * volatility. 0.5 is unbiased; smaller offsets
# shift the mean change upward.
NEUTRAL_OFFSET = 0.5
PRE_CRASH_OFFSET = 0.48
RECOVERY_OFFSET = 0.45

# Range of starting prices for the derived assets of a correlated bundle.
CORRELATED_START_LOW = 80.0
CORRELATED_START_WIDTH = 40.0

# The base asset of a correlated bundle always starts here.
BASE_ASSET_INITIAL_VALUE = 100.0


def resolve_rng(
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> np.random.Generator:
    """
    Pick the random generator for a call.

    An explicit ``rng`` wins; otherwise a new generator seeded with ``seed``
    (which may be None for a non-deterministic run) is created.
    """
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def _as_price_path(prices: list[float]) -> pd.Series:
    # Index by day number so paths from the same horizon align automatically
    return pd.Series(prices, index=range(len(prices)), name='price', dtype=float)


def _extend_with_noise(
    prices: list[float],
    n_steps: int,
    volatility: float,
    offset: float,
    rng: np.random.Generator,
) -> None:
    # Append n_steps multiplicative-noise steps to prices in place
    for _ in range(n_steps):
        change = (rng.random() - offset) * volatility
        prices.append(round_price(prices[-1] * (1.0 + change)))


def generate_random_walk(
    days: int,
    initial_value: float = 100.0,
    volatility: float = 0.02,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> pd.Series:
    """
    Generate an independent price path via multiplicative daily noise.

    **Conceptual**: The simplest "normal market" model: each day the price
    moves by a small random percentage, equally likely up or down. There is no
    drift and no volatility clustering; it is a baseline regime against which
    crash and correlated scenarios are compared.

    **Mathematical**: P_0 = initial_value and for i = 1..days-1:
        u_i ~ U[0, 1)
        change_i = (u_i - 0.5) * volatility
        P_i = round2(P_{i-1} * (1 + change_i))
    so each daily change is uniform on [-volatility/2, +volatility/2).

    **Functionally**:
    - Output: pandas Series of length ``days`` indexed 0..days-1.
    - ``volatility`` is the full width of the per-step noise, not an
      annualized figure. volatility = 0 yields a flat path.

    Args:
        days: Horizon in trading days (>= 1).
        initial_value: Starting price (> 0).
        volatility: Per-step noise amplitude (>= 0).
        rng: Random generator to draw from.
        seed: Seed for a new generator when ``rng`` is not given.

    Returns:
        PricePath as a pandas Series named 'price'.
    """
    rng = resolve_rng(rng, seed)

    prices = [float(initial_value)]
    _extend_with_noise(prices, days - 1, volatility, NEUTRAL_OFFSET, rng)

    logger.debug(
        "random walk: days=%d start=%.2f end=%.2f vol=%.4f",
        days, prices[0], prices[-1], volatility,
    )
    return _as_price_path(prices)


def generate_correlated_assets(
    days: int,
    num_assets: int,
    base_volatility: float = 0.02,
    correlation_strength: float = 0.7,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> pd.DataFrame:
    """
    Generate a bundle of price paths sharing a base-asset factor.

    **Conceptual**: Real assets rarely move independently; a market-wide factor
    pushes most of them the same way. Here asset 0 is an independent random
    walk (the "market") and every other asset blends the market's daily move
    with its own idiosyncratic noise.

    **Mathematical**: Asset 0 = random walk(days, 100, base_volatility).
    For each further asset j, start S_0 = 80 + 40*u (not rounded), then:
        base_change_i = P0_i / P0_{i-1} - 1
        idio_i = (u_i - 0.5) * base_volatility
        change_i = ρ * base_change_i + (1 - ρ) * idio_i
        S_i = round2(S_{i-1} * (1 + change_i))
    where ρ is ``correlation_strength``.

    **Interpretation**:
    - ρ = 1: identical relative moves, different price levels.
    - ρ = 0: independent paths.
    - ρ < 0: moves opposite to the base asset.

    **Draw order**: the base path is drawn first, then for each derived asset
    its start value followed by its daily draws. A fixed seed therefore gives
    the same base path as ``generate_random_walk`` with that seed.

    Args:
        days: Horizon in trading days (>= 1).
        num_assets: Number of paths in the bundle (>= 1).
        base_volatility: Per-step noise amplitude for base and idiosyncratic noise.
        correlation_strength: ρ in [-1, 1].
        rng: Random generator to draw from.
        seed: Seed for a new generator when ``rng`` is not given.

    Returns:
        AssetBundle as a DataFrame with integer columns 0..num_assets-1,
        indexed by day number. Column 0 is the base asset.
    """
    rng = resolve_rng(rng, seed)

    base = generate_random_walk(days, BASE_ASSET_INITIAL_VALUE, base_volatility, rng=rng)
    base_values = base.tolist()
    assets = {0: base_values}

    for j in range(1, num_assets):
        prices = [CORRELATED_START_LOW + rng.random() * CORRELATED_START_WIDTH]

        for i in range(1, len(base_values)):
            base_change = base_values[i] / base_values[i - 1] - 1.0
            idiosyncratic_change = (rng.random() - NEUTRAL_OFFSET) * base_volatility

            # Blend market move and own noise by correlation strength
            change = (
                correlation_strength * base_change
                + (1.0 - correlation_strength) * idiosyncratic_change
            )
            prices.append(round_price(prices[-1] * (1.0 + change)))

        assets[j] = prices

    logger.debug(
        "correlated bundle: days=%d assets=%d rho=%.2f",
        days, num_assets, correlation_strength,
    )
    return pd.DataFrame(assets, index=range(len(base_values)), dtype=float)


def generate_crash_scenario(
    days: int,
    initial_value: float = 100.0,
    crash_day: int = 50,
    crash_severity: float = 0.15,
    volatility: float = 0.02,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> pd.Series:
    """
    Generate a price path with a pre-crash drift, a 5-day crash, and a recovery.

    **Conceptual**: Stress scenarios need a known, severe drawdown at a known
    time. The path climbs gently, then loses roughly ``crash_severity`` of its
    value over five consecutive sessions (a little more, thanks to extra
    noise), then recovers with a stronger upward bias than before the crash.

    **Mathematical**:
      1. Pre-crash, indices 0..crash_day-1: P_0 = initial_value and
         P_i = round2(P_{i-1} * (1 + (u_i - 0.48) * volatility)).
         Mean daily change is +0.02 * volatility.
      2. Crash, 5 days: with d = 1 - (1 - crash_severity)^(1/5),
         P = round2(P_prev * (1 - d - 0.02 * u)).
         Five undisturbed steps at rate d compound to exactly crash_severity;
         the extra noise only ever deepens the fall.
      3. Recovery, indices crash_day+5..days-1:
         P_i = round2(P_{i-1} * (1 + (u_i - 0.45) * volatility)).
         Mean daily change is +0.05 * volatility.

    **Preconditions**: 1 <= crash_day and crash_day + 5 <= days. These are not
    clamped here; a crash window that overruns the horizon produces a path of
    length crash_day + 5.

    Args:
        days: Horizon in trading days.
        initial_value: Starting price (> 0).
        crash_day: Index of the first crash day.
        crash_severity: Total compounded crash loss, in (0, 1).
        volatility: Per-step noise amplitude outside the crash window.
        rng: Random generator to draw from.
        seed: Seed for a new generator when ``rng`` is not given.

    Returns:
        PricePath as a pandas Series named 'price'.
    """
    rng = resolve_rng(rng, seed)

    # Phase 1: pre-crash drift with slight upward bias
    prices = [float(initial_value)]
    _extend_with_noise(prices, crash_day - 1, volatility, PRE_CRASH_OFFSET, rng)

    # Phase 2: crash, compounding to crash_severity before noise
    daily_crash_rate = 1.0 - (1.0 - crash_severity) ** (1.0 / CRASH_LENGTH)
    for _ in range(CRASH_LENGTH):
        extra_noise = rng.random() * CRASH_EXTRA_NOISE
        prices.append(round_price(prices[-1] * (1.0 - daily_crash_rate - extra_noise)))

    # Phase 3: recovery with stronger upward bias
    recovery_days = days - (crash_day + CRASH_LENGTH)
    _extend_with_noise(prices, recovery_days, volatility, RECOVERY_OFFSET, rng)

    logger.debug(
        "crash scenario: days=%d crash_day=%d severity=%.2f pre=%.2f trough=%.2f",
        days, crash_day, crash_severity,
        prices[crash_day - 1], prices[crash_day + CRASH_LENGTH - 1],
    )
    return _as_price_path(prices)
