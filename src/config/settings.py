"""
Configuration settings for scenario generation, backtests, and logging.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
at construction, so a malformed value fails at startup with a clear message
instead of surfacing as a strange number halfway through a scenario run.

**What lives here?**
  - GeneratorSettings: default horizon, volatility, correlation, crash shape,
    and an optional fixed seed for reproducible runs.
  - BacktestSettings: default SMA windows and time horizon.
  - DashboardSettings: default scenario count and length for the risk dashboard.
  - LoggingSettings: log level and optional log file.

The engine functions never read settings themselves; they take explicit
arguments. Settings exist for the entry points (action scripts), which use
them as defaults for command-line flags.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Try to load .env file if present (dev/local environments)
try:
    from dotenv import load_dotenv
    # Load .env from project root
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)
except ImportError:
    # python-dotenv not installed; assume environment variables are set externally
    pass


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got: {raw}")


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")


@dataclass(frozen=True)
class GeneratorSettings:
    """
    Default parameters for the synthetic price generators.

    **Conceptual**: These are the values a user gets when they don't pass a
    flag explicitly. They mirror the defaults of the scenario generator form:
    a 180-day horizon starting at 100 with 2% per-step noise, five assets at
    0.7 correlation, and a 20% crash on day 90.

    Attributes:
        days: Horizon in trading days (>= 1).
        initial_value: Starting price (> 0).
        volatility: Per-step noise amplitude (>= 0). Not annualized.
        num_assets: Number of paths in a correlated bundle (>= 1).
        correlation_strength: Weight on the base asset's move, in [-1, 1].
        crash_day: Index at which the 5-day crash window starts.
        crash_severity: Total compounded loss of the crash window, in (0, 1).
        seed: Optional fixed seed. None means a fresh random generator per run.
    """
    days: int = 180
    initial_value: float = 100.0
    volatility: float = 0.02
    num_assets: int = 5
    correlation_strength: float = 0.7
    crash_day: int = 90
    crash_severity: float = 0.2
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.days < 1:
            raise ValueError(f"SYNTH_DAYS must be >= 1, got: {self.days}")
        if self.initial_value <= 0:
            raise ValueError(
                f"SYNTH_INITIAL_VALUE must be positive, got: {self.initial_value}"
            )
        if self.volatility < 0:
            raise ValueError(
                f"SYNTH_VOLATILITY must be non-negative, got: {self.volatility}"
            )
        if self.num_assets < 1:
            raise ValueError(f"SYNTH_NUM_ASSETS must be >= 1, got: {self.num_assets}")
        if not -1.0 <= self.correlation_strength <= 1.0:
            raise ValueError(
                "SYNTH_CORRELATION_STRENGTH must be in [-1, 1], "
                f"got: {self.correlation_strength}"
            )
        if not 0.0 < self.crash_severity < 1.0:
            raise ValueError(
                f"SYNTH_CRASH_SEVERITY must be in (0, 1), got: {self.crash_severity}"
            )

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """
        Load generator defaults from environment variables.

        **Environment variables** (all optional):
          - SYNTH_DAYS (default 180)
          - SYNTH_INITIAL_VALUE (default 100.0)
          - SYNTH_VOLATILITY (default 0.02)
          - SYNTH_NUM_ASSETS (default 5)
          - SYNTH_CORRELATION_STRENGTH (default 0.7)
          - SYNTH_CRASH_DAY (default 90)
          - SYNTH_CRASH_SEVERITY (default 0.2)
          - SYNTH_SEED (default unset → non-deterministic runs)

        Returns:
            GeneratorSettings object with values loaded from environment.

        Raises:
            ValueError: If a variable cannot be parsed or is out of range.
        """
        seed_str = os.getenv("SYNTH_SEED", "")
        seed = None
        if seed_str:
            try:
                seed = int(seed_str)
            except ValueError:
                raise ValueError(f"SYNTH_SEED must be an integer, got: {seed_str}")

        return cls(
            days=_env_int("SYNTH_DAYS", "180"),
            initial_value=_env_float("SYNTH_INITIAL_VALUE", "100.0"),
            volatility=_env_float("SYNTH_VOLATILITY", "0.02"),
            num_assets=_env_int("SYNTH_NUM_ASSETS", "5"),
            correlation_strength=_env_float("SYNTH_CORRELATION_STRENGTH", "0.7"),
            crash_day=_env_int("SYNTH_CRASH_DAY", "90"),
            crash_severity=_env_float("SYNTH_CRASH_SEVERITY", "0.2"),
            seed=seed,
        )


@dataclass(frozen=True)
class BacktestSettings:
    """
    Default parameters for the SMA crossover backtest.

    Attributes:
        short_period: Fast SMA window (default 10).
        long_period: Slow SMA window (default 50). Must exceed short_period.
        time_horizon: Length of the synthetic markets the backtest runs on.
    """
    short_period: int = 10
    long_period: int = 50
    time_horizon: int = 180

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.short_period < 1:
            raise ValueError(
                f"BACKTEST_SHORT_PERIOD must be >= 1, got: {self.short_period}"
            )
        if self.short_period >= self.long_period:
            raise ValueError(
                "BACKTEST_SHORT_PERIOD must be less than BACKTEST_LONG_PERIOD, "
                f"got: {self.short_period} >= {self.long_period}"
            )
        if self.time_horizon < 1:
            raise ValueError(
                f"BACKTEST_TIME_HORIZON must be >= 1, got: {self.time_horizon}"
            )

    @classmethod
    def from_env(cls) -> "BacktestSettings":
        """
        Load backtest defaults from environment variables.

        **Environment variables** (all optional):
          - BACKTEST_SHORT_PERIOD (default 10)
          - BACKTEST_LONG_PERIOD (default 50)
          - BACKTEST_TIME_HORIZON (default 180)
        """
        return cls(
            short_period=_env_int("BACKTEST_SHORT_PERIOD", "10"),
            long_period=_env_int("BACKTEST_LONG_PERIOD", "50"),
            time_horizon=_env_int("BACKTEST_TIME_HORIZON", "180"),
        )


@dataclass(frozen=True)
class DashboardSettings:
    """
    Default parameters for the multi-scenario risk dashboard.

    Attributes:
        num_scenarios: Number of random walks in the volatility ladder (>= 1).
        scenario_length: Length of every scenario in trading days. The crash
                         scenario starts its crash on day 120, so callers
                         validate this against the crash window.
    """
    num_scenarios: int = 10
    scenario_length: int = 252

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.num_scenarios < 1:
            raise ValueError(
                f"DASHBOARD_NUM_SCENARIOS must be >= 1, got: {self.num_scenarios}"
            )
        if self.scenario_length < 1:
            raise ValueError(
                f"DASHBOARD_SCENARIO_LENGTH must be >= 1, got: {self.scenario_length}"
            )

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        """
        Load risk dashboard defaults from environment variables.

        **Environment variables** (all optional):
          - DASHBOARD_NUM_SCENARIOS (default 10)
          - DASHBOARD_SCENARIO_LENGTH (default 252, one trading year)
        """
        return cls(
            num_scenarios=_env_int("DASHBOARD_NUM_SCENARIOS", "10"),
            scenario_length=_env_int("DASHBOARD_SCENARIO_LENGTH", "252"),
        )


@dataclass(frozen=True)
class LoggingSettings:
    """
    Logging configuration for entry points.

    Attributes:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a rotating log file. None disables file logging.
    """
    level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if not isinstance(logging.getLevelName(self.level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got: {self.level}")

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        """
        Load logging settings from environment variables.

        **Environment variables** (all optional):
          - LOG_LEVEL (default "INFO")
          - LOG_FILE (default unset → console only)
        """
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE") or None,
        )


@dataclass(frozen=True)
class Settings:
    """
    Global settings aggregating every subsystem.

    **Usage pattern**:
      ```python
      from src.config.settings import get_settings

      settings = get_settings()
      days = settings.generator.days
      ```

    Attributes:
        generator: Synthetic generator defaults.
        backtest: SMA backtest defaults.
        dashboard: Risk dashboard defaults.
        logging: Logging configuration.
    """
    generator: GeneratorSettings = field(default_factory=GeneratorSettings)
    backtest: BacktestSettings = field(default_factory=BacktestSettings)
    dashboard: DashboardSettings = field(default_factory=DashboardSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load global settings from environment variables.

        Raises:
            ValueError: If any subsystem's variables are malformed.
        """
        return cls(
            generator=GeneratorSettings.from_env(),
            backtest=BacktestSettings.from_env(),
            dashboard=DashboardSettings.from_env(),
            logging=LoggingSettings.from_env(),
        )


# Convenience singleton for accessing settings throughout the application.
# Tests can construct Settings(...) directly or call reset_settings().
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from the environment on first call, then cached.

    Returns:
        Global Settings singleton.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    Clears the cached settings so the next get_settings() call re-reads the
    environment.
    """
    global _default_settings
    _default_settings = None
