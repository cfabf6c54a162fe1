"""PnL and outcome evaluation shared by replay and live runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tradesim.simulator.models import Direction, Outcome, SimulationSetup, TradeState


@dataclass(frozen=True)
class CandleEvent:
    """Something a single candle did to the position.

    ``terminal`` events end the run; a non-terminal event is an intermediate
    take-profit hit that only updates the reported outcome.
    """

    outcome: Outcome
    exit_price: float
    terminal: bool


def compute_pnl(direction: Direction, entry_price: float, exit_price: float, leverage: float) -> float:
    return ((exit_price - entry_price) / entry_price) * 100 * leverage * direction.sign


def mark_to_market(setup: SimulationSetup, trade: TradeState, price: float) -> float:
    if not trade.is_active:
        return 0.0
    return compute_pnl(setup.direction, trade.entry_price, price, setup.leverage)


def event_pnl(setup: SimulationSetup, trade: TradeState, event: CandleEvent) -> float:
    return mark_to_market(setup, trade, event.exit_price)


def expiry_pnl(setup: SimulationSetup, trade: TradeState, last_close: Optional[float]) -> float:
    if last_close is None:
        return 0.0
    return mark_to_market(setup, trade, last_close)


def duration_minutes_for_replay(final_index: int) -> int:
    # one candle per minute
    return max(0, final_index + 1)


def duration_minutes_for_live(elapsed_seconds: float) -> int:
    return max(0, int(elapsed_seconds // 60))
