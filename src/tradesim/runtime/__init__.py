"""Runtime exports."""

from tradesim.runtime.context import RunContext, create_run_context
from tradesim.runtime.playback import PlaybackLoop, run_to_completion
from tradesim.runtime.store import SimulationStore, setup_from_dict, setup_to_dict

__all__ = [
    "PlaybackLoop",
    "RunContext",
    "SimulationStore",
    "create_run_context",
    "run_to_completion",
    "setup_from_dict",
    "setup_to_dict",
]
