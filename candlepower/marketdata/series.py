from typing import Optional

import numpy as np

from candlepower.marketdata.candle import Candle


class CandleSeries:
    """
    Append-only sequence of candles for one timeframe.

    Provides convenient access to price arrays needed for indicator
    calculations. The series is unbounded; a trading session holds at most a
    day of base candles.

    Example:
        series = CandleSeries("5MINUTE")
        series.add_candle(candle)

        closes = series.get_closes()
        highs = series.get_highs(count=20)  # Last 20 candles only
    """

    def __init__(self, period: str):
        self.period = period
        self._candles: list[Candle] = []

    def add_candle(self, candle: Candle) -> None:
        self._candles.append(candle)

    def clear(self) -> None:
        self._candles.clear()

    def get_candles(self, count: Optional[int] = None) -> tuple[Candle, ...]:
        """
        Get candle objects.

        Args:
            count: Number of most recent candles to return (None = all)

        Returns:
            Tuple of Candle objects, oldest first
        """
        if count is None:
            return tuple(self._candles)
        if count <= 0:
            return ()
        return tuple(self._candles[-count:])

    def get_opens(self, count: Optional[int] = None) -> np.ndarray:
        return np.array([c.open for c in self.get_candles(count)], dtype=np.float64)

    def get_highs(self, count: Optional[int] = None) -> np.ndarray:
        return np.array([c.high for c in self.get_candles(count)], dtype=np.float64)

    def get_lows(self, count: Optional[int] = None) -> np.ndarray:
        return np.array([c.low for c in self.get_candles(count)], dtype=np.float64)

    def get_closes(self, count: Optional[int] = None) -> np.ndarray:
        return np.array([c.close for c in self.get_candles(count)], dtype=np.float64)

    def get_volumes(self, count: Optional[int] = None) -> np.ndarray:
        return np.array([c.volume for c in self.get_candles(count)], dtype=np.float64)

    @property
    def latest(self) -> Optional[Candle]:
        """Most recent candle, or None when empty."""
        return self._candles[-1] if self._candles else None

    def __len__(self) -> int:
        return len(self._candles)

    def __iter__(self):
        return iter(tuple(self._candles))

    def __repr__(self) -> str:
        return f"CandleSeries(period={self.period!r}, candles={len(self._candles)})"
