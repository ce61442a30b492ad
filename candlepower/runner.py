"""
Session orchestration and logging setup.
"""

import logging
import sys
from collections.abc import Callable, Sequence
from typing import Optional, TextIO

from candlepower.config import SimulatorConfig
from candlepower.execution.slippage import RandomSource
from candlepower.marketdata.candle import Candle
from candlepower.session import TradingSession


log = logging.getLogger(__name__)


__all__ = [
    "configure_logging",
    "run_session",
]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(
    level: str = "INFO", force: bool = False, stream: Optional[TextIO] = None
) -> None:
    """
    Send candlepower logs (and everything else on the root logger) to a stream.

    Leaves an already configured root logger alone unless force is set, so a
    host application keeps its own handlers.

    Args:
        level: Logging level name, case-insensitive
        force: Replace existing root handlers
        stream: Destination, stdout by default
    """
    root = logging.getLogger()
    if root.hasHandlers() and not force:
        return

    if force:
        root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)


def run_session(
    candles: Sequence[Candle],
    *,
    config: Optional[SimulatorConfig] = None,
    rng: Optional[RandomSource] = None,
    on_candle: Optional[Callable[[TradingSession, Candle], None]] = None,
) -> dict[str, str | int | float]:
    """
    Replay a day of base candles through a fresh session.

    Contract:
      - config.log_level, when set, is handed to configure_logging first
      - The first config.warm_up_candles seed the charts
      - Every later candle is delivered via TradingSession.on_candle, then
        on_candle(session, candle) may place orders at the new mark
      - The session ends at market close, or when the candles run out
      - Returns a flat summary row

    Example:
        row = run_session(candles, config=SimulatorConfig(log_level="DEBUG"))
    """
    config = config or SimulatorConfig()
    if config.log_level is not None:
        configure_logging(config.log_level)

    session = TradingSession(config=config, rng=rng)

    warm = min(config.warm_up_candles, len(candles))
    session.warm_up(candles[:warm])

    for candle in candles[warm:]:
        session.on_candle(candle)
        if session.game_over:
            break
        if on_candle is not None:
            on_candle(session, candle)

    session.end()

    account = session.engine.account
    agg = session.aggregator
    log.info("Replayed %d candles, %d trades", len(agg.one_minute_candles), len(account.trade_history))
    return {
        "candles": len(agg.one_minute_candles),
        "candles_5m": len(agg.five_minute_candles),
        "candles_15m": len(agg.fifteen_minute_candles),
        "trades": len(account.trade_history),
        "realized_pnl": f"{account.total_realized_pnl:.2f}",
        "final_balance": f"{account.realized_balance:.2f}",
        "realized_gain": f"{account.realized_gain:.2f}",
    }
