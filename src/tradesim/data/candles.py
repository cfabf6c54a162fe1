"""Candle sources: historical fetch and live feed collaborators."""

from __future__ import annotations

import asyncio
import csv
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Optional, Protocol, Sequence

from tradesim.simulator.models import Candle


class HistoricalDataSource(Protocol):
    def fetch(
        self,
        exchange: str,
        symbol: str,
        interval: str,
        start: datetime,
        end: datetime,
    ) -> list[Candle]:
        ...


class LiveFeed(Protocol):
    def stream(self, exchange: str, symbol: str, interval: str) -> AsyncIterator[Candle]:
        ...


def parse_time(value: Any) -> datetime:
    """Epoch milliseconds or ISO-8601 to an aware UTC datetime."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return datetime.fromtimestamp(int(text) / 1000.0, tz=timezone.utc)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def candle_from_mapping(row: dict[str, Any]) -> Candle:
    return Candle(
        time=parse_time(row["time"]),
        open=float(row["open"]),
        high=float(row["high"]),
        low=float(row["low"]),
        close=float(row["close"]),
    )


def candle_to_mapping(candle: Candle) -> dict[str, Any]:
    return {
        "time": candle.time.isoformat(),
        "open": candle.open,
        "high": candle.high,
        "low": candle.low,
        "close": candle.close,
    }


def load_candles(path: str | Path) -> list[Candle]:
    path = Path(path)
    if path.suffix.lower() == ".json":
        rows = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError(f"{path}: expected a list of candles")
    else:
        with path.open(newline="", encoding="utf-8") as handle:
            rows = list(csv.DictReader(handle))

    candles: list[Candle] = []
    for number, row in enumerate(rows, start=1):
        try:
            candles.append(candle_from_mapping(row))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"{path}: bad candle row {number}: {exc}") from exc
    candles.sort(key=lambda candle: candle.time)
    return candles


def within(candles: Iterable[Candle], start: datetime, end: datetime) -> list[Candle]:
    return [candle for candle in candles if start <= candle.time <= end]


@dataclass
class StaticCandleSource:
    candles: Sequence[Candle]

    def fetch(self, exchange: str, symbol: str, interval: str, start: datetime, end: datetime) -> list[Candle]:
        return within(self.candles, start, end)


@dataclass
class FileCandleSource:
    """Reads ``{exchange}_{symbol}_{interval}.csv`` (or ``.json``) from a directory."""

    directory: str | Path

    def path_for(self, exchange: str, symbol: str, interval: str) -> Optional[Path]:
        base = Path(self.directory)
        for suffix in (".csv", ".json"):
            candidate = base / f"{exchange}_{symbol}_{interval}{suffix}"
            if candidate.exists():
                return candidate
        return None

    def fetch(self, exchange: str, symbol: str, interval: str, start: datetime, end: datetime) -> list[Candle]:
        path = self.path_for(exchange, symbol, interval)
        if path is None:
            raise FileNotFoundError(f"No candle file for {exchange} {symbol} {interval} in {self.directory}")
        return within(load_candles(path), start, end)


@dataclass
class PacedLiveFeed:
    """Replays a candle list as a live feed, one candle every ``interval_seconds``."""

    candles: Sequence[Candle]
    interval_seconds: float = 1.0
    _delivered: int = field(default=0, init=False)

    @property
    def delivered(self) -> int:
        return self._delivered

    async def stream(self, exchange: str = "", symbol: str = "", interval: str = "") -> AsyncIterator[Candle]:
        for candle in self.candles:
            await asyncio.sleep(self.interval_seconds)
            self._delivered += 1
            yield candle
