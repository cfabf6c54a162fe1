"""Human-facing simulation notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tradesim.monitoring.notifier import Notifier

if TYPE_CHECKING:
    from tradesim.simulator.models import SimulationSetup


@dataclass
class Monitor:
    notifier: Notifier

    def simulation_completed(self, setup: SimulationSetup) -> None:
        result = setup.result
        if result is None:
            return
        self.notifier.notify(
            "COMPLETED",
            f"{setup.symbol} {setup.direction.value} {result.outcome.value} "
            f"pnl {result.pnl:+.2f}% after {result.duration}",
        )

    def playback_error(self, reason: str) -> None:
        self.notifier.notify("PLAYBACK_ERROR", reason)
