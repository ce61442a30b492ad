"""Per-tick wiring of the candle aggregator and the trading engine."""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from candlepower.config import SimulatorConfig
from candlepower.contracts import ContractType
from candlepower.events import EventDispatcher
from candlepower.execution.engine import TradingEngine
from candlepower.execution.slippage import RandomSource
from candlepower.marketdata.aggregation import CandleAggregator
from candlepower.marketdata.candle import Candle

log = logging.getLogger(__name__)


__all__ = ["TradingSession"]


class TradingSession:
    """
    One trading day: candles in, orders in, account state out.

    The session owns an aggregator and an engine sharing one dispatcher. For
    each delivered candle it folds the candle into every timeframe, then
    marks the engine to the candle's close. The first candle stamped at or
    after the market close is processed the same way, then the game ends at
    its close.
    """

    def __init__(
        self,
        *,
        config: Optional[SimulatorConfig] = None,
        rng: Optional[RandomSource] = None,
        dispatcher: Optional[EventDispatcher] = None,
    ) -> None:
        self.config = config or SimulatorConfig()
        self.dispatcher = dispatcher or EventDispatcher()
        self.aggregator = CandleAggregator(dispatcher=self.dispatcher)
        self.engine = TradingEngine(config=self.config, rng=rng, dispatcher=self.dispatcher)
        self._tz = ZoneInfo(self.config.market_timezone)
        self.last_candle: Optional[Candle] = None

    @property
    def game_over(self) -> bool:
        return self.engine.game_over

    def warm_up(self, candles: Iterable[Candle]) -> int:
        """
        Seed the charts with history before playback.

        The engine is marked once, at the last close.

        Returns:
            Number of candles loaded
        """
        self.aggregator.reset()
        count = 0
        for candle in candles:
            self.aggregator.add_candle(candle)
            self.last_candle = candle
            count += 1
        if self.last_candle is not None:
            self.engine.update_price(self.last_candle.close, self.last_candle.timestamp)
        log.info("Warm-up loaded %d candles", count)
        return count

    def on_candle(self, candle: Candle) -> None:
        """Deliver the next base candle."""
        if self.engine.game_over:
            return

        self.aggregator.add_candle(candle)
        self.last_candle = candle
        self.engine.update_price(candle.close, candle.timestamp)

        if self.is_after_close(candle.timestamp):
            log.info("Reached market close at %s", candle.timestamp.isoformat())
            self.engine.end_session(candle.timestamp)

    def is_after_close(self, ts: datetime) -> bool:
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(self._tz).hour >= self.config.market_close_hour

    def buy(self, contracts: int, contract_type: ContractType | str = ContractType.MNQ) -> None:
        """Buy at the current mark price."""
        self.engine.buy(contracts, self.engine.current_price, self._now(), contract_type)

    def sell(self, contracts: int, contract_type: ContractType | str = ContractType.MNQ) -> None:
        """Sell at the current mark price."""
        self.engine.sell(contracts, self.engine.current_price, self._now(), contract_type)

    def flatten(self) -> float:
        if self.engine.current_price <= 0:
            log.warning("Flatten ignored: no market price yet")
            return 0.0
        return self.engine.flatten(self.engine.current_price, self._now())

    def end(self) -> None:
        """End the day early (e.g. data ran out)."""
        if not self.engine.game_over:
            self.engine.end_session(self._now())

    def reset(self) -> None:
        """Full restart: both aggregator and engine."""
        self.aggregator.reset()
        self.engine.reset()
        self.last_candle = None

    def _now(self) -> datetime:
        if self.last_candle is not None:
            return self.last_candle.timestamp
        return datetime.now(timezone.utc)
