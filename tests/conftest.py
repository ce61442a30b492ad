# tests/conftest.py
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from candlepower.config import SimulatorConfig  # noqa: E402
from candlepower.events import EventDispatcher  # noqa: E402
from candlepower.execution.engine import TradingEngine  # noqa: E402
from candlepower.marketdata.candle import Candle  # noqa: E402

# 2026-01-05 09:00 America/New_York
SESSION_START = datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc)


class FixedRandom:
    """Random source that always returns the same draw."""

    def __init__(self, value: float = 0.0):
        self.value = value

    def random(self) -> float:
        return self.value


def minute(i: int) -> datetime:
    return SESSION_START + timedelta(minutes=i)


def make_candle(i: int, open=100.0, high=None, low=None, close=None, volume=10.0) -> Candle:
    close = open if close is None else close
    high = max(open, close) + 1.0 if high is None else high
    low = min(open, close) - 1.0 if low is None else low
    return Candle(timestamp=minute(i), open=open, high=high, low=low, close=close, volume=volume)


def make_candles(n: int, start_price: float = 100.0, step: float = 0.25) -> list[Candle]:
    out = []
    price = start_price
    for i in range(n):
        close = price + step
        out.append(make_candle(i, open=price, close=close, volume=float(i + 1)))
        price = close
    return out


@pytest.fixture
def ts():
    return SESSION_START


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def engine(dispatcher):
    """Engine whose slippage always draws the smaller (0.25) offset."""
    return TradingEngine(config=SimulatorConfig(), rng=FixedRandom(0.0), dispatcher=dispatcher)
