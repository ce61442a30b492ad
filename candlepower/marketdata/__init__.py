from .aggregation import CandleAggregator, CandleBucket, aggregate_candles, period_to_seconds
from .candle import Candle
from .events import CandleClosedEvent
from .series import CandleSeries

__all__ = [
    "Candle",
    "CandleAggregator",
    "CandleBucket",
    "CandleClosedEvent",
    "CandleSeries",
    "aggregate_candles",
    "period_to_seconds",
]
