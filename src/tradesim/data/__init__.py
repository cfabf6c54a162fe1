"""Candle data sources."""

from tradesim.data.candles import (
    FileCandleSource,
    HistoricalDataSource,
    LiveFeed,
    PacedLiveFeed,
    StaticCandleSource,
    candle_from_mapping,
    candle_to_mapping,
    load_candles,
    parse_time,
)

__all__ = [
    "FileCandleSource",
    "HistoricalDataSource",
    "LiveFeed",
    "PacedLiveFeed",
    "StaticCandleSource",
    "candle_from_mapping",
    "candle_to_mapping",
    "load_candles",
    "parse_time",
]
