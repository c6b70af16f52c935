"""
Tests for the command-line actions.

**Testing philosophy**: Call each script's main(argv) directly with a fixed
seed, capture stdout, and write outputs under tmp_path. Invalid parameters
must be reported and return exit code 1 without generating anything.
"""

import json
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path so we can import actions modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions import generate_synthetic_data, run_risk_dashboard, run_sma_backtest


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Run every action with default settings and console-only logging."""
    for name in ("LOG_FILE", "SYNTH_SEED", "DASHBOARD_NUM_SCENARIOS", "DASHBOARD_SCENARIO_LENGTH"):
        monkeypatch.delenv(name, raising=False)


def test_generate_normal_prints_summary(capsys):
    exit_code = generate_synthetic_data.main(["normal", "--days", "30", "--seed", "1"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Normal Market Scenario" in out
    assert "Days: 30" in out


def test_generate_correlated_writes_csv(tmp_path):
    output = tmp_path / "bundle.csv"
    exit_code = generate_synthetic_data.main([
        "correlated", "--days", "40", "--num-assets", "3", "--seed", "2",
        "--output", str(output),
    ])

    assert exit_code == 0
    frame = pd.read_csv(output)
    assert list(frame.columns) == ["day", "asset1", "asset2", "asset3"]
    assert frame["day"].tolist() == list(range(1, 41))
    assert frame["asset1"].iloc[0] == 100.0


def test_generate_crash_rejects_window_past_horizon(tmp_path, capsys):
    output = tmp_path / "crash.csv"
    exit_code = generate_synthetic_data.main([
        "crash", "--days", "50", "--crash-day", "48", "--output", str(output),
    ])

    assert exit_code == 1
    assert "✗" in capsys.readouterr().out
    assert not output.exists()


def test_generate_rejects_unknown_scenario():
    """argparse rejects scenario names outside the choices."""
    with pytest.raises(SystemExit):
        generate_synthetic_data.main(["sideways"])


def test_sma_backtest_with_stress_writes_json(tmp_path, capsys):
    output = tmp_path / "metrics.json"
    exit_code = run_sma_backtest.main([
        "--short", "5", "--long", "20", "--days", "120", "--stress", "--seed", "3",
        "--output", str(output),
    ])

    assert exit_code == 0
    assert "SMA(5,20)" in capsys.readouterr().out
    summary = json.loads(output.read_text())
    assert set(summary) == {"normal", "stress"}
    assert "position_changes" in summary["normal"]
    assert summary["stress"]["max_drawdown"] >= 0


def test_sma_backtest_rejects_short_not_below_long(capsys):
    exit_code = run_sma_backtest.main(["--short", "50", "--long", "10"])

    assert exit_code == 1
    assert "Invalid Parameters" in capsys.readouterr().out


def test_sma_backtest_rejects_stress_on_tiny_horizon():
    # floor(0.6 * 8) = 4, and 4 + 5 > 8
    exit_code = run_sma_backtest.main(["--short", "2", "--long", "4", "--days", "8", "--stress"])

    assert exit_code == 1


def test_risk_dashboard_writes_csv(tmp_path, capsys):
    output = tmp_path / "dashboard.csv"
    exit_code = run_risk_dashboard.main([
        "--scenarios", "2", "--length", "150", "--seed", "1", "--output", str(output),
    ])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Risk Dashboard" in out
    assert "Value at Risk" in out
    frame = pd.read_csv(output)
    assert frame["scenario"].tolist() == ["Scenario 1", "Scenario 2"]


@pytest.mark.parametrize("argv", [
    ["--scenarios", "0"],
    ["--length", "124"],
])
def test_risk_dashboard_rejects_invalid_parameters(argv):
    assert run_risk_dashboard.main(argv) == 1


def test_risk_dashboard_defaults_come_from_settings(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("DASHBOARD_NUM_SCENARIOS", "3")
    monkeypatch.setenv("DASHBOARD_SCENARIO_LENGTH", "130")
    output = tmp_path / "dashboard.csv"

    exit_code = run_risk_dashboard.main(["--seed", "1", "--output", str(output)])

    assert exit_code == 0
    assert "Calm-market risk" in capsys.readouterr().out
    assert len(pd.read_csv(output)) == 3
