import numpy as np
import pytest

from conftest import make_candle, make_candles

from candlepower.marketdata import Candle, CandleSeries


@pytest.fixture
def series():
    s = CandleSeries("1MINUTE")
    for c in make_candles(5):
        s.add_candle(c)
    return s


def test_len_and_latest(series):
    assert len(series) == 5
    assert series.latest.close == pytest.approx(101.25)
    assert CandleSeries("5MINUTE").latest is None


def test_get_candles_count(series):
    assert len(series.get_candles()) == 5
    assert len(series.get_candles(2)) == 2
    assert series.get_candles(0) == ()
    assert series.get_candles(2)[-1] is series.latest


def test_get_candles_is_read_only_copy(series):
    out = series.get_candles()
    assert isinstance(out, tuple)
    series.add_candle(make_candle(99))
    assert len(out) == 5


def test_price_arrays(series):
    closes = series.get_closes()
    assert isinstance(closes, np.ndarray)
    assert closes.dtype == np.float64
    np.testing.assert_allclose(closes, [100.25, 100.5, 100.75, 101.0, 101.25])
    np.testing.assert_allclose(series.get_opens(2), [100.75, 101.0])
    np.testing.assert_allclose(series.get_volumes(), [1, 2, 3, 4, 5])
    assert series.get_highs().shape == (5,)
    assert (series.get_lows() < series.get_highs()).all()


def test_clear(series):
    series.clear()
    assert len(series) == 0
    assert series.get_closes().size == 0


def test_candle_helpers(ts):
    c = Candle(timestamp=ts, open=10, high=14, low=8, close=12, volume=3)
    assert c.mid == pytest.approx(11)
    assert c.range == pytest.approx(6)
    assert c.typical_price == pytest.approx(34 / 3)
    assert len(c.id) == 32


def test_candle_from_price(ts):
    c = Candle.from_price(25000.25, ts)
    assert c.open == c.high == c.low == c.close == 25000.25
    assert c.volume == 0.0


def test_candle_ids_unique_but_ignored_in_equality(ts):
    a = Candle.from_price(1.0, ts)
    b = Candle.from_price(1.0, ts)
    assert a.id != b.id
    assert a == b
