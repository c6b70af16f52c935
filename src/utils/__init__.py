"""
Generic utility functions shared across modules.

Includes price rounding, daily returns, moving averages, logging setup,
and error classes.
"""
