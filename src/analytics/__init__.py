"""
Synthetic price generation and risk/performance metrics.

Includes the random-walk, correlated-asset, and crash-scenario generators, and
the risk calculator (volatility, Sharpe, Sortino, drawdown, VaR).
"""
