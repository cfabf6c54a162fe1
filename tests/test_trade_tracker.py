from datetime import datetime, timedelta, timezone

from tradesim.simulator import Candle, Direction, Outcome, SimulationSetup, TradeTracker


START = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def _setup(direction, entry, take_profit, stop_loss):
    return SimulationSetup(
        id="sim-test",
        exchange="binance",
        symbol="BTCUSDT",
        direction=direction,
        entry_range=(entry, entry),
        take_profit=tuple(take_profit),
        stop_loss=stop_loss,
        leverage=10,
        timestamp=START,
        end_time=START + timedelta(hours=8),
    )


def _candle(minute, high, low, close=None):
    close = close if close is not None else (high + low) / 2
    return Candle(time=START + timedelta(minutes=minute), open=close, high=high, low=low, close=close)


def test_long_fill_then_take_profits_in_order():
    tracker = TradeTracker(_setup(Direction.LONG, 100, (105, 110), 95))

    assert tracker.observe(_candle(0, 101, 99), 0) is None
    assert tracker.state.is_active is True
    assert tracker.state.entry_price == 100
    assert tracker.state.entry_candle_index == 0

    event = tracker.observe(_candle(1, 106, 101), 1)
    assert event.outcome == Outcome.TP1_HIT
    assert event.terminal is False
    assert tracker.state.hit_tp_levels == (105,)

    event = tracker.observe(_candle(2, 111, 106), 2)
    assert event.outcome == Outcome.TP2_HIT
    assert event.terminal is True
    assert event.exit_price == 110
    assert tracker.state.hit_tp_levels == (105, 110)


def test_stop_loss_wins_over_take_profit_in_same_candle():
    tracker = TradeTracker(_setup(Direction.LONG, 100, (105,), 95))
    tracker.observe(_candle(0, 101, 99), 0)

    event = tracker.observe(_candle(1, 120, 90), 1)

    assert event.outcome == Outcome.SL_HIT
    assert event.exit_price == 95
    assert tracker.state.hit_tp_levels == ()


def test_fill_and_stop_loss_in_one_candle():
    tracker = TradeTracker(_setup(Direction.LONG, 100, (105,), 95))

    event = tracker.observe(_candle(0, 101, 94), 0)

    assert tracker.state.is_active is True
    assert event.outcome == Outcome.SL_HIT


def test_short_uses_highest_remaining_target_first():
    tracker = TradeTracker(_setup(Direction.SHORT, 100, (95, 90), 105))

    assert tracker.observe(_candle(0, 100.5, 99), 0) is None
    assert tracker.next_take_profit() == 95

    event = tracker.observe(_candle(1, 99, 94), 1)
    assert event.outcome == Outcome.TP1_HIT
    assert event.terminal is False
    assert tracker.next_take_profit() == 90


def test_short_stop_loss_on_high():
    tracker = TradeTracker(_setup(Direction.SHORT, 100, (95,), 105))
    tracker.observe(_candle(0, 100, 99), 0)

    event = tracker.observe(_candle(1, 105, 100), 1)

    assert event.outcome == Outcome.SL_HIT


def test_take_profit_label_follows_configured_position():
    tracker = TradeTracker(_setup(Direction.LONG, 100, (110, 105), 95))
    tracker.observe(_candle(0, 100, 99), 0)

    event = tracker.observe(_candle(1, 106, 100), 1)

    assert event.outcome == Outcome.TP2_HIT
    assert event.terminal is False


def test_targets_ignored_before_fill():
    tracker = TradeTracker(_setup(Direction.LONG, 90, (105,), 85))

    assert tracker.observe(_candle(0, 120, 95), 0) is None
    assert tracker.state.is_active is False
    assert tracker.state.hit_tp_levels == ()


def test_hit_levels_only_grow_and_stay_bounded():
    setup = _setup(Direction.LONG, 100, (102, 104, 106), 90)
    tracker = TradeTracker(setup)
    highs = [100, 103, 103, 105, 101, 108, 109]

    previous = ()
    for minute, high in enumerate(highs):
        tracker.observe(_candle(minute, high, 99), minute)
        levels = tracker.state.hit_tp_levels
        assert levels[: len(previous)] == previous
        assert len(levels) - len(previous) <= 1
        assert len(set(levels)) == len(levels)
        assert len(levels) <= len(setup.take_profit)
        assert set(levels) <= set(setup.take_profit)
        previous = levels


def test_reset_clears_position():
    tracker = TradeTracker(_setup(Direction.LONG, 100, (105, 110), 95))
    tracker.observe(_candle(0, 106, 99), 0)

    tracker.reset()

    assert tracker.state.is_active is False
    assert tracker.state.hit_tp_levels == ()
    assert tracker.remaining_take_profits() == [105, 110]
