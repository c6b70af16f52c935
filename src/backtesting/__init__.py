"""
SMA crossover backtest engine.

Turns a price path into daily strategy returns and long/flat positions that
feed directly into the risk calculator.
"""
