import uuid
from dataclasses import dataclass, field
from datetime import datetime


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Candle:
    """
    Represents a single OHLCV candle.

    Candles are produced once per base tick or once per closed aggregation
    bucket and never change afterwards.

    Attributes:
        timestamp: Start of the period the candle covers
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        volume: Trading volume (or 0 if unavailable)
        id: Unique identifier, generated when not supplied
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_price(cls, price: float, timestamp: datetime) -> "Candle":
        """Build a flat candle from a single price point."""
        p = float(price)
        return cls(timestamp=timestamp, open=p, high=p, low=p, close=p)

    @property
    def typical_price(self) -> float:
        """Calculate typical price (HLC/3)."""
        return (self.high + self.low + self.close) / 3

    @property
    def mid(self) -> float:
        """Calculate midpoint between high and low."""
        return (self.high + self.low) / 2

    @property
    def range(self) -> float:
        """Calculate candle range (high - low)."""
        return self.high - self.low

    def __repr__(self) -> str:
        return (
            f"Candle(timestamp={self.timestamp.isoformat()}, "
            f"O={self.open:.2f}, H={self.high:.2f}, "
            f"L={self.low:.2f}, C={self.close:.2f}, "
            f"V={self.volume:.0f})"
        )
