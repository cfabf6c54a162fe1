from dataclasses import replace
from datetime import datetime, timedelta, timezone

from tradesim.monitoring import LogNotifier, Monitor
from tradesim.runtime import run_to_completion
from tradesim.simulator import Candle, Direction, SavedSignal, SimulationEngine, setup_from_signal


start = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

prices = [100.8, 100.4, 99.6, 100.9, 102.2, 103.4, 104.1, 105.6, 104.9, 106.8, 108.3, 110.4]
candles = tuple(
    Candle(
        time=start + timedelta(minutes=minute),
        open=price,
        high=price + 0.6,
        low=price - 0.6,
        close=price,
    )
    for minute, price in enumerate(prices)
)

signal = SavedSignal(
    id="demo",
    symbol="BTCUSDT",
    direction=Direction.LONG,
    entry_range=(100.0, 100.0),
    take_profit=(105.0, 110.0),
    stop_loss=97.5,
    leverage=10,
    timestamp=start,
)
setup = replace(setup_from_signal(signal, start=start), historical_data=candles)

engine = SimulationEngine(setup, monitor=Monitor(LogNotifier()))
engine.play()
engine.set_speed(4)

for _ in range(30):
    engine.tick()
print("Candle index:", engine.state.candle_index)
print("Outcome so far:", engine.state.outcome)

engine.pause()
engine.scrub_to(2)
print("Scrubbed PnL at", engine.display.elapsed_time, "->", round(engine.display.pnl, 2))

final = run_to_completion(engine)
print("Outcome:", final.result.outcome.value)
print("Duration:", final.result.duration)
print("PnL %:", round(final.result.pnl, 2))
