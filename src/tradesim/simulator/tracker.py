"""Per-run position tracking: entry fill and take-profit consumption."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from tradesim.simulator.evaluator import CandleEvent
from tradesim.simulator.models import Candle, Direction, Outcome, SimulationSetup, TradeState


class TradeTracker:
    def __init__(self, setup: SimulationSetup) -> None:
        self.setup = setup
        self._state = TradeState()

    @property
    def state(self) -> TradeState:
        return self._state

    def reset(self) -> None:
        self._state = TradeState()

    def remaining_take_profits(self) -> list[float]:
        return [tp for tp in self.setup.take_profit if tp not in self._state.hit_tp_levels]

    def next_take_profit(self) -> Optional[float]:
        remaining = self.remaining_take_profits()
        if not remaining:
            return None
        if self.setup.direction == Direction.LONG:
            return min(remaining)
        return max(remaining)

    def observe(self, candle: Candle, index: int) -> Optional[CandleEvent]:
        """Apply one candle. Stop-loss wins over take-profit inside a candle."""
        setup = self.setup
        is_long = setup.direction == Direction.LONG

        if not self._state.is_active:
            entry = setup.entry_price
            if (is_long and candle.low <= entry) or (not is_long and candle.high >= entry):
                self._state = replace(
                    self._state,
                    is_active=True,
                    entry_price=entry,
                    entry_candle_index=index,
                )

        if not self._state.is_active:
            return None

        if (is_long and candle.low <= setup.stop_loss) or (not is_long and candle.high >= setup.stop_loss):
            return CandleEvent(outcome=Outcome.SL_HIT, exit_price=setup.stop_loss, terminal=True)

        remaining = self.remaining_take_profits()
        next_tp = self.next_take_profit()
        if next_tp is None:
            return None
        if (is_long and candle.high >= next_tp) or (not is_long and candle.low <= next_tp):
            self._state = replace(self._state, hit_tp_levels=self._state.hit_tp_levels + (next_tp,))
            level = setup.take_profit.index(next_tp) + 1
            return CandleEvent(
                outcome=Outcome.take_profit(level),
                exit_price=next_tp,
                terminal=len(remaining) == 1,
            )
        return None
