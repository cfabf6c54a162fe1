from datetime import datetime, timedelta, timezone

import pytest

from tradesim.simulator import (
    Candle,
    Direction,
    SimulationSetup,
    TradeState,
    initial_display,
    project_display,
)


START = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def _series(count):
    return tuple(
        Candle(time=START + timedelta(minutes=i), open=100 + i, high=101 + i, low=99 + i, close=100 + i)
        for i in range(count)
    )


def _setup(direction=Direction.LONG):
    return SimulationSetup(
        id="sim-projector",
        exchange="binance",
        symbol="SOLUSDT",
        direction=direction,
        entry_range=(100, 100),
        take_profit=(150,),
        stop_loss=50,
        leverage=2,
        timestamp=START,
        end_time=START + timedelta(hours=8),
    )


def test_window_trails_requested_index():
    data = _series(250)

    display = project_display(data, 180, _setup(), TradeState())

    assert len(display.chart_data) == 100
    assert display.chart_data[0] == data[81]
    assert display.chart_data[-1] == data[180]
    assert display.current_candle == data[180]
    assert display.elapsed_time == "181m"
    assert display.display_index == 180


def test_window_clamped_at_start():
    data = _series(250)

    display = project_display(data, 4, _setup(), TradeState())

    assert display.chart_data == data[:5]


def test_pnl_uses_authoritative_entry_price():
    data = _series(20)
    trade = TradeState(is_active=True, entry_price=100, entry_candle_index=0)

    long_view = project_display(data, 10, _setup(), trade)
    short_view = project_display(data, 10, _setup(Direction.SHORT), trade)

    assert long_view.pnl == pytest.approx(20)
    assert short_view.pnl == pytest.approx(-20)


def test_no_pnl_without_fill():
    display = project_display(_series(20), 10, _setup(), TradeState())

    assert display.pnl == 0


def test_out_of_range_index_has_no_snapshot():
    data = _series(5)

    assert project_display(data, -1, _setup(), TradeState()) is None
    assert project_display(data, 5, _setup(), TradeState()) is None


def test_initial_display_shows_first_window():
    data = _series(120)

    display = initial_display(data)

    assert display.chart_data == data[:100]
    assert display.current_candle is None
    assert display.display_index == -1
    assert display.elapsed_time == "0m"
