"""Tests for multi-timeframe candle aggregation."""

import pytest

from conftest import make_candle, make_candles, minute

from candlepower.events import EventDispatcher, EventRecorder
from candlepower.marketdata import (
    Candle,
    CandleAggregator,
    CandleBucket,
    CandleClosedEvent,
    aggregate_candles,
    period_to_seconds,
)


def _feed(agg: CandleAggregator, candles: list[Candle]) -> None:
    for c in candles:
        agg.add_candle(c)


def test_five_minute_candles_close_every_five_inputs() -> None:
    agg = CandleAggregator()
    candles = make_candles(10)
    _feed(agg, candles)

    assert len(agg.one_minute_candles) == 10
    assert len(agg.five_minute_candles) == 2

    for k, out in enumerate(agg.five_minute_candles):
        members = candles[5 * k : 5 * k + 5]
        assert out.timestamp == members[0].timestamp
        assert out.open == pytest.approx(members[0].open)
        assert out.close == pytest.approx(members[-1].close)
        assert out.high == pytest.approx(max(c.high for c in members))
        assert out.low == pytest.approx(min(c.low for c in members))
        assert out.volume == pytest.approx(sum(c.volume for c in members))


def test_fifteen_minute_bucket_runs_independently() -> None:
    agg = CandleAggregator()
    candles = make_candles(30)
    _feed(agg, candles)

    assert len(agg.five_minute_candles) == 6
    assert len(agg.fifteen_minute_candles) == 2

    second = agg.fifteen_minute_candles[1]
    assert second.timestamp == minute(15)
    assert second.open == pytest.approx(candles[15].open)
    assert second.close == pytest.approx(candles[29].close)
    assert second.volume == pytest.approx(sum(range(16, 31)))


def test_bucket_closes_on_count_not_wall_clock() -> None:
    """Gaps in timestamps do not close a bucket early."""
    agg = CandleAggregator()
    for i in (0, 1, 7, 30, 31):
        agg.add_candle(make_candle(i))
    assert len(agg.five_minute_candles) == 1
    assert agg.five_minute_candles[0].timestamp == minute(0)


def test_extremes_taken_across_members() -> None:
    agg = CandleAggregator()
    agg.add_candle(make_candle(0, open=100, high=101, low=99, close=100.5))
    agg.add_candle(make_candle(1, open=100.5, high=108, low=100, close=107))
    agg.add_candle(make_candle(2, open=107, high=107.5, low=95, close=96))
    agg.add_candle(make_candle(3, open=96, high=97, low=96, close=96.5))
    agg.add_candle(make_candle(4, open=96.5, high=99, low=96, close=98))

    out = agg.five_minute_candles[0]
    assert (out.open, out.high, out.low, out.close) == (100, 108, 95, 98)


@pytest.mark.parametrize("r", [1, 2, 3, 4])
def test_partial_five_minute_candle(r: int) -> None:
    agg = CandleAggregator()
    candles = make_candles(5 + r)
    _feed(agg, candles)

    partial = agg.current_five_minute_candle
    assert partial is not None
    members = candles[5:]
    assert len(members) == r
    assert partial.open == pytest.approx(members[0].open)
    assert partial.close == pytest.approx(members[-1].close)
    assert partial.volume == pytest.approx(sum(c.volume for c in members))
    assert partial.timestamp == members[0].timestamp


def test_partial_unavailable_when_bucket_closes() -> None:
    agg = CandleAggregator()
    assert agg.current_five_minute_candle is None

    candles = make_candles(10)
    _feed(agg, candles[:9])
    assert agg.current_five_minute_candle is not None

    agg.add_candle(candles[9])
    assert agg.current_five_minute_candle is None
    assert len(agg.five_minute_candles) == 2


def test_partial_fifteen_minute_candle() -> None:
    agg = CandleAggregator()
    candles = make_candles(20)
    _feed(agg, candles)

    partial = agg.current_fifteen_minute_candle
    assert partial is not None
    assert partial.open == pytest.approx(candles[15].open)
    assert partial.close == pytest.approx(candles[19].close)
    # the 5-minute bucket closed on the 20th candle
    assert agg.current_five_minute_candle is None


def test_partial_query_has_no_side_effects() -> None:
    agg = CandleAggregator()
    _feed(agg, make_candles(3))
    first = agg.current_five_minute_candle
    second = agg.current_five_minute_candle
    assert first == second
    assert len(agg.five_minute_candles) == 0


def test_reset_returns_to_empty_state() -> None:
    agg = CandleAggregator()
    _feed(agg, make_candles(17))
    agg.reset()

    assert agg.one_minute_candles == ()
    assert agg.five_minute_candles == ()
    assert agg.fifteen_minute_candles == ()
    assert agg.current_five_minute_candle is None
    assert agg.current_fifteen_minute_candle is None

    # buckets restart from the next candle
    _feed(agg, make_candles(5))
    assert len(agg.five_minute_candles) == 1


def test_publishes_candle_closed_events() -> None:
    dispatcher = EventDispatcher()
    recorder = EventRecorder(dispatcher, CandleClosedEvent)
    agg = CandleAggregator(dispatcher=dispatcher)

    _feed(agg, make_candles(15))

    by_tf: dict[str, int] = {}
    for e in recorder.events:
        by_tf[e.timeframe] = by_tf.get(e.timeframe, 0) + 1
    assert by_tf == {"1MINUTE": 15, "5MINUTE": 3, "15MINUTE": 1}


def test_custom_periods_and_describe() -> None:
    agg = CandleAggregator(base_period="5MINUTE", target_periods=("15MINUTE", "HOUR"))
    assert agg.describe() == {"15MINUTE": 3, "HOUR": 12}
    assert agg.periods == ("5MINUTE", "15MINUTE", "HOUR")


def test_target_must_be_multiple_of_base() -> None:
    with pytest.raises(ValueError, match="must be a multiple"):
        CandleAggregator(base_period="5MINUTE", target_periods=("7MINUTE",))
    with pytest.raises(ValueError, match="must be a multiple"):
        CandleAggregator(base_period="5MINUTE", target_periods=("5MINUTE",))


def test_unknown_period_lookup() -> None:
    agg = CandleAggregator()
    with pytest.raises(ValueError, match="not aggregated"):
        agg.candles("HOUR")
    assert agg.current_candle("1MINUTE") is None


def test_period_to_seconds() -> None:
    assert period_to_seconds("SECOND") == 1
    assert period_to_seconds("1MINUTE") == 60
    assert period_to_seconds("15minute") == 900
    assert period_to_seconds("HOUR") == 3600
    with pytest.raises(ValueError, match="Unsupported period"):
        period_to_seconds("DAY")


def test_bucket_and_aggregate_helpers() -> None:
    assert aggregate_candles([]) is None

    bucket = CandleBucket(2)
    assert bucket.aggregate() is None
    bucket.add_candle(make_candle(0))
    assert not bucket.is_full()
    bucket.add_candle(make_candle(1))
    assert bucket.is_full()
    bucket.clear()
    assert len(bucket) == 0

    with pytest.raises(ValueError):
        CandleBucket(0)
