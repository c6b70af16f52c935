"""
Multi-step scenario workflows.

Chains generators, backtests, and risk metrics into reproducible runs: normal
vs stress backtest comparisons, risk dashboards, and market overviews.
"""
