"""
Configuration loading and parameter validation.

Provides strongly typed settings objects loaded from environment variables,
and the caller-side validators that reject parameters the engine assumes away.
"""
