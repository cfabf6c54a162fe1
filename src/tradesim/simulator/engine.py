"""Replay/live playback engine for a single trade setup."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from fractions import Fraction
from typing import Callable, Optional

from tradesim.config.models import PlaybackConfig
from tradesim.monitoring.monitor import Monitor
from tradesim.simulator.evaluator import (
    CandleEvent,
    duration_minutes_for_live,
    duration_minutes_for_replay,
    event_pnl,
    expiry_pnl,
    mark_to_market,
)
from tradesim.simulator.models import (
    Candle,
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
from tradesim.simulator.projector import initial_display, project_display, trailing_window
from tradesim.simulator.tracker import TradeTracker


CompleteCallback = Callable[[SimulationSetup], None]
Notify = Callable[[], None]


class SimulationEngine:
    """Candle-by-candle evaluator behind a virtual clock.

    Replay runs consume ``setup.historical_data`` through :meth:`tick`, which
    converts fixed frame increments into whole candles at the current speed.
    Live runs consume one candle per :meth:`live_update`. Both paths share the
    same tracker and completion logic.

    ``candle_index`` is the authoritative cursor; ``display.display_index`` may
    trail it while scrubbing a paused replay.
    """

    def __init__(
        self,
        setup: SimulationSetup,
        on_complete: Optional[CompleteCallback] = None,
        on_pause: Optional[Notify] = None,
        on_resume: Optional[Notify] = None,
        config: Optional[PlaybackConfig] = None,
        autoplay: bool = False,
        monitor: Optional[Monitor] = None,
        audit_log: Optional[object] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if setup.mode == SimulationMode.REPLAY and not setup.historical_data:
            raise ValueError(f"Replay simulation {setup.id} requires historical data")

        self.setup = setup
        self.config = config or PlaybackConfig()
        self.monitor = monitor
        self._on_complete = on_complete
        self._on_pause = on_pause
        self._on_resume = on_resume
        self._audit_log = audit_log
        self._clock = clock or (lambda: datetime.now(tz=setup.timestamp.tzinfo))

        self._data: tuple[Candle, ...] = tuple(setup.historical_data or ())
        self._live_candles: list[Candle] = []
        self._tracker = TradeTracker(setup)
        self._accumulator_ms = Fraction(0)
        self._frame_ms = Fraction(1000, self.config.frame_rate)
        self._started = False

        self._state = EngineState(status=EngineStatus.LOADING, speed=self.config.default_speed)
        self._display = DisplayState()
        self._load(autoplay)

    # -- read access ---------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def display(self) -> DisplayState:
        return self._display

    @property
    def trade_state(self) -> TradeState:
        return self._tracker.state

    @property
    def candle_count(self) -> int:
        return len(self._data)

    @property
    def accumulator_ms(self) -> float:
        return float(self._accumulator_ms)

    @property
    def is_live(self) -> bool:
        return self.setup.mode == SimulationMode.LIVE

    @property
    def is_completed(self) -> bool:
        return self._state.status == EngineStatus.COMPLETED

    @property
    def is_ticking(self) -> bool:
        return (
            not self.is_live
            and self._state.status == EngineStatus.RUNNING
            and self._state.is_playing
        )

    # -- controls ------------------------------------------------------

    def toggle_play(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def play(self) -> None:
        if self.is_completed:
            return
        self._state = replace(self._state, is_playing=True, status=EngineStatus.RUNNING)
        self._set_setup_status(SetupStatus.RUNNING)
        if not self._started:
            self._started = True
            self._log("simulation_started", {"mode": self.setup.mode.value})
        else:
            self._log("simulation_resumed", {"candle_index": self._state.candle_index})
        self._notify(self._on_resume)

    def pause(self) -> None:
        if self.is_completed:
            return
        self._state = replace(self._state, is_playing=False, status=EngineStatus.PAUSED)
        self._set_setup_status(SetupStatus.PAUSED)
        self._log("simulation_paused", {"candle_index": self._state.candle_index})
        self._notify(self._on_pause)

    def reset(self) -> None:
        if self.is_live:
            return
        self._tracker.reset()
        self._accumulator_ms = Fraction(0)
        self._started = False
        self._state = EngineState(
            status=EngineStatus.PAUSED,
            is_playing=False,
            candle_index=-1,
            speed=self.config.default_speed,
            outcome=None,
        )
        self._display = initial_display(self._data, self.config.visible_candle_count)
        self.setup = replace(self.setup, status=SetupStatus.PENDING, result=None)
        self._log("simulation_reset", {})

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"Speed must be positive, got {speed}")
        if self.is_live:
            return
        self._state = replace(self._state, speed=speed)

    def stop(self) -> None:
        if self.is_completed:
            return
        self._complete(Outcome.STOPPED, self._display.pnl, self._state.candle_index)

    def scrub_to(self, index: int) -> None:
        if self._state.is_playing or self.is_completed or self.is_live:
            return
        if self._state.candle_index < 0:
            return
        scrub_index = max(0, min(self._state.candle_index, index))
        display = self._project(scrub_index)
        if display is not None:
            self._display = display

    # -- clock ---------------------------------------------------------

    def tick(self) -> int:
        """Advance one timer frame. Returns the number of candles evaluated."""
        if not self.is_ticking:
            return 0

        self._accumulator_ms += self._frame_ms
        candle_ms = Fraction(1000) / Fraction(self._state.speed)
        if self._accumulator_ms < candle_ms:
            return 0

        to_process = int(self._accumulator_ms // candle_ms)
        self._accumulator_ms %= candle_ms

        processed = 0
        for _ in range(to_process):
            if self.is_completed:
                break
            processed += 1
            if not self._advance():
                break

        if not self.is_completed:
            display = self._project(self._state.candle_index)
            if display is not None:
                self._display = display
        return processed

    def _advance(self) -> bool:
        next_index = self._state.candle_index + 1
        if next_index >= len(self._data):
            last_close = self._data[-1].close if self._data else None
            pnl = expiry_pnl(self.setup, self._tracker.state, last_close)
            self._complete(Outcome.EXPIRED, pnl, next_index - 1)
            return False

        self._state = replace(self._state, candle_index=next_index)
        return self._evaluate(self._data[next_index], next_index)

    # -- live feed -----------------------------------------------------

    def live_update(self, candle: Candle) -> None:
        if not self.is_live or self.is_completed or not self._state.is_playing:
            return

        if self._state.status == EngineStatus.PAUSED:
            self._state = replace(self._state, status=EngineStatus.RUNNING)
            self._set_setup_status(SetupStatus.RUNNING)
            self._notify(self._on_resume)

        index = self._state.candle_index + 1
        self._state = replace(self._state, candle_index=index)
        self._live_candles.append(candle)
        window = self.config.visible_candle_count
        if len(self._live_candles) > window:
            del self._live_candles[:-window]

        if not self._evaluate(candle, index):
            return

        if self.config.enforce_live_end_time and candle.time >= self.setup.end_time:
            pnl = mark_to_market(self.setup, self._tracker.state, candle.close)
            self._complete(Outcome.EXPIRED, pnl, index)
            return

        self._display = DisplayState(
            chart_data=trailing_window(self._live_candles, len(self._live_candles) - 1, window),
            current_candle=candle,
            pnl=mark_to_market(self.setup, self._tracker.state, candle.close),
            elapsed_time=f"{self._live_elapsed_minutes()}m",
            display_index=index,
        )

    # -- internals -----------------------------------------------------

    def _evaluate(self, candle: Candle, index: int) -> bool:
        was_active = self._tracker.state.is_active
        event = self._tracker.observe(candle, index)
        if not was_active and self._tracker.state.is_active:
            self._log("position_filled", {"index": index, "entry_price": self._tracker.state.entry_price})
        if event is None:
            return True
        return self._handle_event(event, index)

    def _handle_event(self, event: CandleEvent, index: int) -> bool:
        pnl = event_pnl(self.setup, self._tracker.state, event)
        if event.terminal:
            self._complete(event.outcome, pnl, index)
            return False
        self._state = replace(self._state, outcome=event.outcome)
        self._log("take_profit_hit", {"outcome": event.outcome.value, "price": event.exit_price, "index": index})
        return True

    def _project(self, index: int) -> Optional[DisplayState]:
        return project_display(
            self._data,
            index,
            self.setup,
            self._tracker.state,
            self.config.visible_candle_count,
        )

    def _complete(self, outcome: Outcome, pnl: float, final_index: int) -> None:
        if self.is_completed:
            return

        if self.is_live:
            minutes = self._live_elapsed_minutes()
        else:
            minutes = duration_minutes_for_replay(final_index)
        result = SimulationResult(outcome=outcome, duration_minutes=minutes, pnl=pnl)

        self._state = replace(self._state, status=EngineStatus.COMPLETED, is_playing=False, outcome=outcome)
        self._display = replace(self._display, pnl=pnl, elapsed_time=result.duration)
        self.setup = replace(self.setup, status=SetupStatus.COMPLETED, result=result)

        self._log(
            "simulation_completed",
            {"outcome": outcome.value, "pnl": pnl, "duration_minutes": minutes, "final_index": final_index},
        )
        if self.monitor is not None:
            self.monitor.simulation_completed(self.setup)
        if self._on_complete is not None:
            self._on_complete(self.setup)

    def _live_elapsed_minutes(self) -> int:
        elapsed = self._clock() - self.setup.timestamp
        return duration_minutes_for_live(elapsed.total_seconds())

    def _set_setup_status(self, status: SetupStatus) -> None:
        self.setup = replace(self.setup, status=status)

    def _load(self, autoplay: bool) -> None:
        if self.is_live:
            self._state = replace(self._state, status=EngineStatus.PAUSED, is_playing=autoplay)
            if autoplay:
                self._started = True
                self._log("simulation_started", {"mode": self.setup.mode.value})
                self._notify(self._on_resume)
            return

        self._state = replace(self._state, status=EngineStatus.PAUSED)
        self._display = initial_display(self._data, self.config.visible_candle_count)
        if autoplay:
            self.play()

    def _notify(self, callback: Optional[Notify]) -> None:
        if callback is not None:
            callback()

    def _log(self, event: str, payload: dict) -> None:
        if self._audit_log is None:
            return
        self._audit_log.log(event, {"simulation_id": self.setup.id, **payload})
