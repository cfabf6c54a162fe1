"""Read-only chart/PnL snapshots for a play position."""

from __future__ import annotations

from typing import Optional, Sequence

from tradesim.simulator.evaluator import mark_to_market
from tradesim.simulator.models import Candle, DisplayState, SimulationSetup, TradeState

VISIBLE_CANDLE_COUNT = 100


def trailing_window(data: Sequence[Candle], index: int, window: int = VISIBLE_CANDLE_COUNT) -> tuple[Candle, ...]:
    start = max(0, index - window + 1)
    return tuple(data[start : index + 1])


def initial_display(data: Sequence[Candle], window: int = VISIBLE_CANDLE_COUNT) -> DisplayState:
    return DisplayState(chart_data=tuple(data[:window]))


def project_display(
    data: Sequence[Candle],
    index: int,
    setup: SimulationSetup,
    trade: TradeState,
    window: int = VISIBLE_CANDLE_COUNT,
) -> Optional[DisplayState]:
    """Snapshot at ``index``.

    PnL uses the entry price of the authoritative run, not one derived from
    the scrubbed position. Returns ``None`` when ``index`` is out of range.
    """
    if index < 0 or index >= len(data):
        return None
    candle = data[index]
    return DisplayState(
        chart_data=trailing_window(data, index, window),
        current_candle=candle,
        pnl=mark_to_market(setup, trade, candle.close),
        elapsed_time=f"{index + 1}m",
        display_index=index,
    )
