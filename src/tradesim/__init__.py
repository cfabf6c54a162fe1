"""Candle-by-candle trade setup replay and live simulation."""

__version__ = "1.0.0"
