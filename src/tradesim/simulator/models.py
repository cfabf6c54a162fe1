"""Simulation data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Direction.LONG else -1


class SimulationMode(str, Enum):
    REPLAY = "replay"
    LIVE = "live"


class SetupStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class EngineStatus(str, Enum):
    LOADING = "loading"
    PAUSED = "paused"
    RUNNING = "running"
    COMPLETED = "completed"


class Outcome(str, Enum):
    TP1_HIT = "TP1 Hit"
    TP2_HIT = "TP2 Hit"
    TP3_HIT = "TP3 Hit"
    SL_HIT = "SL Hit"
    EXPIRED = "Expired"
    STOPPED = "Stopped"

    @classmethod
    def take_profit(cls, level: int) -> "Outcome":
        return cls(f"TP{level} Hit")


@dataclass(frozen=True)
class Candle:
    time: datetime
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class SimulationResult:
    outcome: Outcome
    duration_minutes: int
    pnl: float

    @property
    def duration(self) -> str:
        return f"{self.duration_minutes}m"


@dataclass(frozen=True)
class SimulationSetup:
    id: str
    exchange: str
    symbol: str
    direction: Direction
    entry_range: tuple[float, float]
    take_profit: tuple[float, ...]
    stop_loss: float
    leverage: float
    timestamp: datetime
    end_time: datetime
    mode: SimulationMode = SimulationMode.REPLAY
    status: SetupStatus = SetupStatus.PENDING
    result: Optional[SimulationResult] = None
    historical_data: Optional[tuple[Candle, ...]] = None

    @property
    def entry_price(self) -> float:
        # entry_range is always built as (price, price)
        return self.entry_range[0]


@dataclass(frozen=True)
class TradeState:
    is_active: bool = False
    entry_price: float = 0.0
    entry_candle_index: int = -1
    hit_tp_levels: tuple[float, ...] = ()


@dataclass(frozen=True)
class EngineState:
    status: EngineStatus = EngineStatus.LOADING
    is_playing: bool = False
    candle_index: int = -1
    speed: float = 1.0
    outcome: Optional[Outcome] = None


@dataclass(frozen=True)
class DisplayState:
    chart_data: tuple[Candle, ...] = ()
    current_candle: Optional[Candle] = None
    pnl: float = 0.0
    elapsed_time: str = "0m"
    display_index: int = -1
