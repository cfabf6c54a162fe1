"""Asyncio driver for a simulation engine.

The timer, the live feed and external controls never touch the engine
directly: they enqueue commands, and a single consumer applies them in order.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from tradesim.data.candles import LiveFeed
from tradesim.monitoring.monitor import Monitor
from tradesim.simulator.engine import SimulationEngine
from tradesim.simulator.models import SimulationMode, SimulationSetup

COMMANDS = frozenset(
    {
        "tick",
        "play",
        "pause",
        "toggle_play",
        "reset",
        "set_speed",
        "stop",
        "scrub_to",
        "live_update",
    }
)
# internal marker queued by the feed task; not accepted by submit()
FEED_ENDED = "feed_ended"


def run_to_completion(engine: SimulationEngine, max_ticks: Optional[int] = None) -> SimulationSetup:
    """Tick a replay engine synchronously until it completes."""
    if engine.setup.mode != SimulationMode.REPLAY:
        raise ValueError("run_to_completion only drives replay simulations")
    if not engine.state.is_playing:
        engine.play()
    ticks = 0
    while not engine.is_completed:
        if max_ticks is not None and ticks >= max_ticks:
            raise RuntimeError(f"Simulation {engine.setup.id} did not complete within {max_ticks} ticks")
        engine.tick()
        ticks += 1
    return engine.setup


class PlaybackLoop:
    def __init__(
        self,
        engine: SimulationEngine,
        live_feed: Optional[LiveFeed] = None,
        interval: str = "1m",
        monitor: Optional[Monitor] = None,
        audit_log: Optional[object] = None,
    ) -> None:
        self.engine = engine
        self.live_feed = live_feed
        self.interval = interval
        self.monitor = monitor
        self._audit_log = audit_log
        self._queue: asyncio.Queue[tuple[str, tuple[Any, ...]]] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._error: Optional[BaseException] = None

    def _log(self, event: str, payload: dict) -> None:
        if self._audit_log is None:
            return
        self._audit_log.log(event, payload)

    def submit(self, command: str, *args: Any) -> None:
        if command not in COMMANDS:
            raise ValueError(f"Unknown playback command: {command}")
        self._queue.put_nowait((command, args))

    def submit_threadsafe(self, command: str, *args: Any) -> None:
        if self._loop is None:
            raise RuntimeError("Playback loop is not running")
        self._loop.call_soon_threadsafe(self.submit, command, *args)

    def _apply(self, command: str, args: tuple[Any, ...]) -> None:
        getattr(self.engine, command)(*args)

    async def _consume(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            get = asyncio.ensure_future(self._queue.get())
            stopped = asyncio.ensure_future(stop_event.wait())
            done, _ = await asyncio.wait({get, stopped}, return_when=asyncio.FIRST_COMPLETED)
            if get not in done:
                get.cancel()
                break
            stopped.cancel()
            command, args = get.result()
            if command == FEED_ENDED:
                self._log("feed_ended", {"simulation_id": self.engine.setup.id, "status": self.engine.state.status.value})
                stop_event.set()
                return
            try:
                self._apply(command, args)
            except Exception as exc:
                self._error = exc
                self._log("playback_error", {"simulation_id": self.engine.setup.id, "command": command, "error": str(exc)})
                if self.monitor is not None:
                    self.monitor.playback_error(f"{command}: {exc}")
                stop_event.set()
                return
            if self.engine.is_completed:
                stop_event.set()

    async def _run_timer(self, stop_event: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        frame = 1.0 / self.engine.config.frame_rate
        deadline = loop.time()
        while not stop_event.is_set():
            if self.engine.is_ticking:
                self.submit("tick")
            deadline += frame
            delay = deadline - loop.time()
            if delay <= 0:
                # fell behind; resync instead of bursting
                deadline = loop.time()
                await asyncio.sleep(0)
                continue
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

    async def _run_feed(self, stop_event: asyncio.Event) -> None:
        if self.live_feed is None:
            return
        setup = self.engine.setup
        try:
            async for candle in self.live_feed.stream(setup.exchange, setup.symbol, self.interval):
                if stop_event.is_set():
                    return
                self.submit("live_update", candle)
        except Exception as exc:
            self._error = exc
            self._log("playback_error", {"simulation_id": self.engine.setup.id, "command": "live_feed", "error": str(exc)})
            if self.monitor is not None:
                self.monitor.playback_error(f"live_feed: {exc}")
            stop_event.set()
            return
        # queued behind the last update so every delivered candle is evaluated
        self._queue.put_nowait((FEED_ENDED, ()))

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> SimulationSetup:
        if stop_event is None:
            stop_event = asyncio.Event()
        self._loop = asyncio.get_running_loop()
        self._error = None

        async with asyncio.TaskGroup() as group:
            consumer = group.create_task(self._consume(stop_event))
            if self.engine.setup.mode == SimulationMode.REPLAY:
                timer = group.create_task(self._run_timer(stop_event))
            else:
                timer = group.create_task(self._run_feed(stop_event))
            await stop_event.wait()
            for task in (consumer, timer):
                if not task.done():
                    task.cancel()

        self._loop = None
        if self._error is not None:
            raise self._error
        return self.engine.setup
