"""Persist simulation setups and their results."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from tradesim.simulator.models import (
    Direction,
    Outcome,
    SetupStatus,
    SimulationMode,
    SimulationResult,
    SimulationSetup,
)


def _parse_dt(value: str) -> datetime:
    if value.endswith("Z"):
        value = value.replace("Z", "+00:00")
    return datetime.fromisoformat(value)


def setup_to_dict(setup: SimulationSetup) -> dict[str, Any]:
    result = None
    if setup.result is not None:
        result = {
            "outcome": setup.result.outcome.value,
            "duration_minutes": setup.result.duration_minutes,
            "pnl": setup.result.pnl,
        }
    return {
        "id": setup.id,
        "exchange": setup.exchange,
        "symbol": setup.symbol,
        "direction": setup.direction.value,
        "entry_range": list(setup.entry_range),
        "take_profit": list(setup.take_profit),
        "stop_loss": setup.stop_loss,
        "leverage": setup.leverage,
        "timestamp": setup.timestamp.isoformat(),
        "end_time": setup.end_time.isoformat(),
        "mode": setup.mode.value,
        "status": setup.status.value,
        "result": result,
    }


def setup_from_dict(data: dict[str, Any]) -> SimulationSetup:
    result = None
    if data.get("result"):
        payload = data["result"]
        result = SimulationResult(
            outcome=Outcome(payload["outcome"]),
            duration_minutes=int(payload["duration_minutes"]),
            pnl=float(payload["pnl"]),
        )
    entry_low, entry_high = data["entry_range"]
    return SimulationSetup(
        id=data["id"],
        exchange=data["exchange"],
        symbol=data["symbol"],
        direction=Direction(data["direction"]),
        entry_range=(float(entry_low), float(entry_high)),
        take_profit=tuple(float(tp) for tp in data["take_profit"]),
        stop_loss=float(data["stop_loss"]),
        leverage=float(data["leverage"]),
        timestamp=_parse_dt(data["timestamp"]),
        end_time=_parse_dt(data["end_time"]),
        mode=SimulationMode(data.get("mode", "replay")),
        status=SetupStatus(data.get("status", "pending")),
        result=result,
    )


class SimulationStore:
    """JSON file of setups, newest first. Candle data is never written."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def list_all(self) -> list[SimulationSetup]:
        if not self.path.exists():
            return []
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        return [setup_from_dict(item) for item in payload.get("simulations", [])]

    def get(self, simulation_id: str) -> Optional[SimulationSetup]:
        return next((setup for setup in self.list_all() if setup.id == simulation_id), None)

    def upsert(self, setup: SimulationSetup) -> None:
        setups = self.list_all()
        for index, existing in enumerate(setups):
            if existing.id == setup.id:
                setups[index] = setup
                break
        else:
            setups.insert(0, setup)
        self._write(setups)

    def delete(self, simulation_id: str) -> bool:
        setups = self.list_all()
        remaining = [setup for setup in setups if setup.id != simulation_id]
        if len(remaining) == len(setups):
            return False
        self._write(remaining)
        return True

    def record_result(self, setup: SimulationSetup) -> None:
        self.upsert(replace(setup, historical_data=None))

    def _write(self, setups: list[SimulationSetup]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"simulations": [setup_to_dict(setup) for setup in setups]}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
