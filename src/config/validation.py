"""
Caller-side parameter validation for the engine.

**Conceptual**: The generators, backtester, and risk calculator are pure
numerical functions that assume their preconditions hold; they do not check
them. Whoever collects parameters from a user (the action scripts, a notebook,
a web form) runs these validators first and reports ``InvalidParameters``
instead of calling the engine with inputs it was never meant to handle.

Each validator returns None on success and raises on the first violation.
"""

from src.utils.errors import InvalidParameters

# Length of the crash window in generate_crash_scenario.
CRASH_LENGTH = 5


def validate_days(days: int) -> None:
    """Require a horizon of at least one trading day."""
    if days < 1:
        raise InvalidParameters("days", days, "horizon must be at least 1 trading day")


def validate_random_walk(days: int, initial_value: float, volatility: float) -> None:
    """Validate RandomWalk generator inputs."""
    validate_days(days)
    if initial_value <= 0:
        raise InvalidParameters("initial_value", initial_value, "must be positive")
    if volatility < 0:
        raise InvalidParameters("volatility", volatility, "must be non-negative")


def validate_correlated_assets(
    days: int,
    num_assets: int,
    base_volatility: float,
    correlation_strength: float,
) -> None:
    """Validate correlated asset generator inputs."""
    validate_days(days)
    if num_assets < 1:
        raise InvalidParameters("num_assets", num_assets, "need at least one asset")
    if base_volatility < 0:
        raise InvalidParameters("base_volatility", base_volatility, "must be non-negative")
    if not -1.0 <= correlation_strength <= 1.0:
        raise InvalidParameters(
            "correlation_strength", correlation_strength, "must lie in [-1, 1]"
        )


def validate_crash_scenario(
    days: int,
    initial_value: float,
    crash_day: int,
    crash_severity: float,
    volatility: float,
) -> None:
    """
    Validate crash scenario inputs.

    The 5-day crash window must start after the first (initial) price and end
    inside the horizon: 1 <= crash_day and crash_day + 5 <= days.
    """
    validate_random_walk(days, initial_value, volatility)
    if crash_day < 1:
        raise InvalidParameters("crash_day", crash_day, "must be at least 1")
    if crash_day + CRASH_LENGTH > days:
        raise InvalidParameters(
            "crash_day",
            crash_day,
            f"crash window of {CRASH_LENGTH} days must fit inside {days} days",
        )
    if not 0.0 < crash_severity < 1.0:
        raise InvalidParameters("crash_severity", crash_severity, "must lie in (0, 1)")


def validate_sma_periods(short_period: int, long_period: int) -> None:
    """Short SMA period must be at least 1 and strictly less than the long one."""
    if short_period < 1:
        raise InvalidParameters("short_period", short_period, "must be at least 1")
    if short_period >= long_period:
        raise InvalidParameters(
            "short_period",
            short_period,
            f"short SMA period must be less than long SMA period ({long_period})",
        )
