"""Candle aggregation for multi-timeframe charts."""

import logging
from typing import Optional

from candlepower.events import EventDispatcher
from candlepower.marketdata.candle import Candle
from candlepower.marketdata.events import CandleClosedEvent
from candlepower.marketdata.series import CandleSeries


__all__ = [
    "CandleAggregator",
    "CandleBucket",
    "aggregate_candles",
    "period_to_seconds",
]

log = logging.getLogger(__name__)


def period_to_seconds(period: str) -> int:
    """Convert period string to seconds."""
    p = period.strip().upper()

    if p == "SECOND":
        return 1
    if p.endswith("MINUTE"):
        n = int(p.removesuffix("MINUTE") or 1)
        return n * 60
    if p == "HOUR":
        return 60 * 60

    raise ValueError(f"Unsupported period: {period!r}")


def aggregate_candles(candles: list[Candle]) -> Optional[Candle]:
    """
    Fold an ordered run of candles into one.

    open/timestamp come from the first member, close from the last,
    high/low are the extremes and volume is summed.
    """
    if not candles:
        return None

    first = candles[0]
    return Candle(
        timestamp=first.timestamp,
        open=first.open,
        high=max(c.high for c in candles),
        low=min(c.low for c in candles),
        close=candles[-1].close,
        volume=sum(c.volume for c in candles),
    )


class CandleBucket:
    """Accumulates base candles for one not-yet-closed higher-timeframe period."""

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError("bucket size must be > 0")
        self.size = size
        self._candles: list[Candle] = []

    def add_candle(self, candle: Candle) -> None:
        self._candles.append(candle)

    def is_full(self) -> bool:
        return len(self._candles) >= self.size

    def aggregate(self) -> Optional[Candle]:
        return aggregate_candles(self._candles)

    def clear(self) -> None:
        self._candles.clear()

    def __len__(self) -> int:
        return len(self._candles)


class CandleAggregator:
    """
    Fold a base-period candle stream into higher timeframes by count
    (not wall-clock bucketing).

    - A target bucket closes the instant it holds target/base candles.
    - The closed candle is stamped with its first member's timestamp.
    - The in-progress bucket can be queried as a partial candle.

    Usage:
        aggregator = CandleAggregator()
        aggregator.add_candle(one_minute_candle)
        aggregator.five_minute_candles           # closed 5-minute candles
        aggregator.current_five_minute_candle    # partial, or None
    """

    def __init__(
        self,
        *,
        base_period: str = "1MINUTE",
        target_periods: tuple[str, ...] = ("5MINUTE", "15MINUTE"),
        dispatcher: Optional[EventDispatcher] = None,
    ):
        """
        Initialize aggregator.

        Args:
            base_period: Period of the incoming candles (e.g., "1MINUTE")
            target_periods: Higher periods to build (e.g., "5MINUTE")
            dispatcher: Optional channel receiving CandleClosedEvent
        """
        self.base_period = base_period.strip().upper()
        self.base_s = period_to_seconds(self.base_period)
        self._dispatcher = dispatcher

        self._series: dict[str, CandleSeries] = {self.base_period: CandleSeries(self.base_period)}
        self._buckets: dict[str, CandleBucket] = {}

        for period in target_periods:
            target = period.strip().upper()
            target_s = period_to_seconds(target)
            if target_s <= self.base_s or target_s % self.base_s != 0:
                raise ValueError(
                    f"target_period ({target}) must be a multiple of base_period ({self.base_period})"
                )
            self._series[target] = CandleSeries(target)
            self._buckets[target] = CandleBucket(target_s // self.base_s)

    @property
    def periods(self) -> tuple[str, ...]:
        """All maintained periods, base first."""
        return tuple(self._series)

    def add_candle(self, candle: Candle) -> None:
        """Ingest one base candle; callers deliver them in timestamp order."""
        self._series[self.base_period].add_candle(candle)
        self._publish(self.base_period, candle)

        for period, bucket in self._buckets.items():
            bucket.add_candle(candle)
            if not bucket.is_full():
                continue

            aggregated = bucket.aggregate()
            bucket.clear()
            self._series[period].add_candle(aggregated)
            log.debug("Closed %s candle %r", period, aggregated)
            self._publish(period, aggregated)

    def reset(self) -> None:
        """Drop every series and open bucket."""
        for series in self._series.values():
            series.clear()
        for bucket in self._buckets.values():
            bucket.clear()

    def series(self, period: str) -> CandleSeries:
        p = period.strip().upper()
        try:
            return self._series[p]
        except KeyError:
            raise ValueError(f"Period {period!r} is not aggregated (have {', '.join(self._series)})") from None

    def candles(self, period: str) -> tuple[Candle, ...]:
        return self.series(period).get_candles()

    def current_candle(self, period: str) -> Optional[Candle]:
        """
        Live aggregate of the open bucket for period.

        Returns None for the base period, or when the bucket is empty or has
        just closed.
        """
        p = period.strip().upper()
        if p == self.base_period:
            return None
        self.series(p)
        bucket = self._buckets[p]
        if len(bucket) == 0 or bucket.is_full():
            return None
        return bucket.aggregate()

    @property
    def one_minute_candles(self) -> tuple[Candle, ...]:
        return self.candles(self.base_period)

    @property
    def five_minute_candles(self) -> tuple[Candle, ...]:
        return self.candles("5MINUTE")

    @property
    def fifteen_minute_candles(self) -> tuple[Candle, ...]:
        return self.candles("15MINUTE")

    @property
    def current_five_minute_candle(self) -> Optional[Candle]:
        return self.current_candle("5MINUTE")

    @property
    def current_fifteen_minute_candle(self) -> Optional[Candle]:
        return self.current_candle("15MINUTE")

    def describe(self) -> dict[str, int]:
        """Return {period: bucket size in base candles} for debugging."""
        return {period: bucket.size for period, bucket in self._buckets.items()}

    def _publish(self, period: str, candle: Candle) -> None:
        if self._dispatcher is not None:
            self._dispatcher.publish(CandleClosedEvent(timeframe=period, candle=candle))
