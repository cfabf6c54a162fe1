"""Trade setup simulation."""

from tradesim.simulator.engine import SimulationEngine
from tradesim.simulator.evaluator import CandleEvent, compute_pnl, mark_to_market
from tradesim.simulator.models import (
    Candle,
    Direction,
    DisplayState,
    EngineState,
    EngineStatus,
    Outcome,
    SetupStatus,
    SimulationMode,
    SimulationResult,
    SimulationSetup,
    TradeState,
)
from tradesim.simulator.projector import VISIBLE_CANDLE_COUNT, initial_display, project_display
from tradesim.simulator.setup import SavedSignal, SetupError, create_setup, setup_from_signal, stop_loss_distance_pct
from tradesim.simulator.tracker import TradeTracker

__all__ = [
    "Candle",
    "CandleEvent",
    "Direction",
    "DisplayState",
    "EngineState",
    "EngineStatus",
    "Outcome",
    "SavedSignal",
    "SetupError",
    "SetupStatus",
    "SimulationEngine",
    "SimulationMode",
    "SimulationResult",
    "SimulationSetup",
    "TradeState",
    "TradeTracker",
    "VISIBLE_CANDLE_COUNT",
    "compute_pnl",
    "create_setup",
    "initial_display",
    "mark_to_market",
    "project_display",
    "setup_from_signal",
    "stop_loss_distance_pct",
]
