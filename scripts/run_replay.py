from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from tradesim.config import load_config
from tradesim.data import FileCandleSource, candle_to_mapping, parse_time
from tradesim.monitoring import LogNotifier, Monitor
from tradesim.runtime import PlaybackLoop, SimulationStore, create_run_context, run_to_completion
from tradesim.simulator import SetupError, SimulationEngine, create_setup, stop_loss_distance_pct


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a trade setup against historical 1m candles")
    parser.add_argument("--config", required=True)
    parser.add_argument("--symbol", required=True)
    parser.add_argument("--direction", choices=["LONG", "SHORT"], required=True)
    parser.add_argument("--entry", type=float, required=True)
    parser.add_argument("--tp", type=float, action="append", required=True, help="repeat for each level")
    parser.add_argument("--sl", type=float, required=True)
    parser.add_argument("--leverage", type=float, default=1.0)
    parser.add_argument("--start", required=True, help="ISO-8601 or epoch ms")
    parser.add_argument("--end", required=True, help="ISO-8601 or epoch ms")
    parser.add_argument("--exchange")
    parser.add_argument("--speed", type=float, help="one of playback.speed_options")
    parser.add_argument("--realtime", action="store_true", help="play back at --speed candles per second")
    parser.add_argument("--output")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    config = load_config(args.config)

    try:
        setup = create_setup(
            symbol=args.symbol,
            direction=args.direction,
            entry=args.entry,
            take_profit=args.tp,
            stop_loss=args.sl,
            leverage=args.leverage,
            exchange=args.exchange or config.data.default_exchange,
            start=parse_time(args.start),
            end=parse_time(args.end),
        )
    except SetupError as exc:
        raise SystemExit(f"Invalid setup: {exc}") from exc

    context = create_run_context(args.config, config.run_id_prefix, simulation_id=setup.id)
    audit = context.audit_log(config.monitoring.audit_log_path)
    store = SimulationStore(config.store.path)
    store.upsert(setup)

    source = FileCandleSource(config.data.candle_dir)
    candles = source.fetch(setup.exchange, setup.symbol, config.data.interval, setup.timestamp, setup.end_time)
    if not candles:
        raise SystemExit(f"No candles for {setup.symbol} between {setup.timestamp} and {setup.end_time}")

    engine = SimulationEngine(
        replace(setup, historical_data=tuple(candles)),
        on_complete=store.record_result,
        config=config.playback,
        monitor=Monitor(LogNotifier()),
        audit_log=audit,
    )
    speed = args.speed or config.playback.default_speed
    if speed not in config.playback.speed_options:
        options = ", ".join(f"{value:g}" for value in config.playback.speed_options)
        raise SystemExit(f"--speed must be one of: {options}")

    if args.realtime:
        loop = PlaybackLoop(engine, interval=config.data.interval, audit_log=audit)
        loop.submit("set_speed", speed)
        loop.submit("play")
        final = asyncio.run(loop.run())
    else:
        engine.set_speed(speed)
        final = run_to_completion(engine)

    current = engine.display.current_candle
    report = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "run_id": context.run_id,
        "simulation_id": final.id,
        "symbol": final.symbol,
        "direction": final.direction.value,
        "stop_loss_distance_pct": stop_loss_distance_pct(final.entry_price, final.stop_loss),
        "result": {
            "outcome": final.result.outcome.value,
            "duration": final.result.duration,
            "pnl": final.result.pnl,
        },
        "entry_filled": engine.trade_state.is_active,
        "hit_tp_levels": list(engine.trade_state.hit_tp_levels),
        "last_candle": candle_to_mapping(current) if current is not None else None,
    }
    text = json.dumps(report, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        print(f"Wrote {output_path}")
    else:
        print(text)


if __name__ == "__main__":
    main()
