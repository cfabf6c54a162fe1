"""Create and validate simulation setups."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from tradesim.simulator.models import Direction, SetupStatus, SimulationMode, SimulationSetup

DEFAULT_WINDOW = timedelta(hours=8)
DEFAULT_EXCHANGE = "binance"
MAX_TAKE_PROFIT_LEVELS = 3


class SetupError(ValueError):
    pass


@dataclass(frozen=True)
class SavedSignal:
    id: str
    symbol: str
    direction: Direction
    entry_range: tuple[float, float]
    take_profit: tuple[float, ...]
    stop_loss: float
    leverage: float
    timestamp: datetime
    timeframe: str = "1h"


def stop_loss_distance_pct(entry: float, stop_loss: float) -> float:
    if entry <= 0:
        return 0.0
    return abs(entry - stop_loss) / entry * 100


def validate_setup(setup: SimulationSetup) -> None:
    if not setup.symbol:
        raise SetupError("Symbol is required")
    if setup.end_time <= setup.timestamp:
        raise SetupError("End time must be after the start time")
    if setup.leverage <= 0:
        raise SetupError("Leverage must be a positive number")
    if not 1 <= len(setup.take_profit) <= MAX_TAKE_PROFIT_LEVELS:
        raise SetupError(f"Between 1 and {MAX_TAKE_PROFIT_LEVELS} take-profit levels are required")
    if len(set(setup.take_profit)) != len(setup.take_profit):
        raise SetupError("Take-profit levels must be distinct")

    entry = setup.entry_price
    if entry <= 0:
        raise SetupError("Entry price must be positive")
    if setup.direction == Direction.LONG:
        if setup.stop_loss >= entry:
            raise SetupError("Stop loss must be below entry for a LONG setup")
        if any(tp <= entry for tp in setup.take_profit):
            raise SetupError("Take-profit levels must be above entry for a LONG setup")
    else:
        if setup.stop_loss <= entry:
            raise SetupError("Stop loss must be above entry for a SHORT setup")
        if any(tp >= entry for tp in setup.take_profit):
            raise SetupError("Take-profit levels must be below entry for a SHORT setup")


def create_setup(
    symbol: str,
    direction: Direction | str,
    entry: float,
    take_profit: Iterable[float],
    stop_loss: float,
    leverage: float,
    exchange: str = DEFAULT_EXCHANGE,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    mode: SimulationMode | str = SimulationMode.REPLAY,
    setup_id: Optional[str] = None,
) -> SimulationSetup:
    start = start or datetime.now(timezone.utc)
    try:
        direction = Direction(direction)
        mode = SimulationMode(mode)
    except ValueError as exc:
        raise SetupError(str(exc)) from exc
    setup = SimulationSetup(
        id=setup_id or f"manual-{uuid.uuid4()}",
        exchange=exchange,
        symbol=symbol,
        direction=direction,
        entry_range=(float(entry), float(entry)),
        take_profit=tuple(float(tp) for tp in take_profit),
        stop_loss=float(stop_loss),
        leverage=float(leverage),
        timestamp=start,
        end_time=end or start + DEFAULT_WINDOW,
        mode=mode,
        status=SetupStatus.PENDING,
    )
    validate_setup(setup)
    return setup


def setup_from_signal(
    signal: SavedSignal,
    exchange: str = DEFAULT_EXCHANGE,
    start: Optional[datetime] = None,
    window: timedelta = DEFAULT_WINDOW,
) -> SimulationSetup:
    start = start or datetime.now(timezone.utc)
    setup = SimulationSetup(
        id=f"sim-{signal.id}",
        exchange=exchange,
        symbol=signal.symbol,
        direction=signal.direction,
        entry_range=signal.entry_range,
        take_profit=tuple(signal.take_profit),
        stop_loss=signal.stop_loss,
        leverage=signal.leverage,
        timestamp=start,
        end_time=start + window,
        mode=SimulationMode.REPLAY,
        status=SetupStatus.PENDING,
    )
    validate_setup(setup)
    return setup
