from candlepower.events import DomainEvent, event

from .candle import Candle


@event
class CandleClosedEvent(DomainEvent):
    """Emitted for every base candle and every closed higher-timeframe bucket."""

    timeframe: str
    candle: Candle
