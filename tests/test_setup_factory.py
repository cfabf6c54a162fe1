from datetime import datetime, timedelta, timezone

import pytest

from tradesim.simulator import (
    Direction,
    SavedSignal,
    SetupError,
    SetupStatus,
    SimulationMode,
    create_setup,
    setup_from_signal,
    stop_loss_distance_pct,
)


START = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def test_manual_setup_defaults():
    setup = create_setup("BTCUSDT", "LONG", 100, [110, 120], 95, 10, start=START)

    assert setup.id.startswith("manual-")
    assert setup.entry_range == (100.0, 100.0)
    assert setup.take_profit == (110.0, 120.0)
    assert setup.end_time == START + timedelta(hours=8)
    assert setup.mode == SimulationMode.REPLAY
    assert setup.status == SetupStatus.PENDING
    assert setup.direction == Direction.LONG


def test_short_setup_accepts_mirrored_levels():
    setup = create_setup("BTCUSDT", Direction.SHORT, 100, [90], 105, 3, start=START, mode="live")

    assert setup.mode == SimulationMode.LIVE


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"symbol": ""}, "Symbol"),
        ({"end": START - timedelta(minutes=1)}, "End time"),
        ({"leverage": 0}, "Leverage"),
        ({"take_profit": []}, "take-profit"),
        ({"take_profit": [110, 120, 130, 140]}, "take-profit"),
        ({"stop_loss": 101}, "Stop loss"),
        ({"take_profit": [99]}, "above entry"),
        ({"direction": "SIDEWAYS"}, "SIDEWAYS"),
    ],
)
def test_rejects_malformed_setups(kwargs, message):
    params = {
        "symbol": "BTCUSDT",
        "direction": "LONG",
        "entry": 100,
        "take_profit": [110],
        "stop_loss": 95,
        "leverage": 10,
        "start": START,
    }
    params.update(kwargs)

    with pytest.raises(SetupError, match=message):
        create_setup(**params)


def test_setup_from_saved_signal():
    signal = SavedSignal(
        id="abc",
        symbol="ETHUSDT",
        direction=Direction.SHORT,
        entry_range=(2000.0, 2000.0),
        take_profit=(1950.0, 1900.0),
        stop_loss=2050.0,
        leverage=5,
        timestamp=START,
    )

    setup = setup_from_signal(signal, start=START)

    assert setup.id == "sim-abc"
    assert setup.exchange == "binance"
    assert setup.take_profit == (1950.0, 1900.0)
    assert setup.end_time - setup.timestamp == timedelta(hours=8)


def test_stop_loss_distance():
    assert stop_loss_distance_pct(200, 190) == pytest.approx(5)
    assert stop_loss_distance_pct(0, 10) == 0


def test_stop_loss_distance_for_short_setup():
    setup = create_setup("ETHUSDT", "SHORT", 2000, [1900], 2050, 5, start=START)

    assert stop_loss_distance_pct(setup.entry_price, setup.stop_loss) == pytest.approx(2.5)
