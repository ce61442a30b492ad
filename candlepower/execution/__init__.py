"""
Order execution against the simulated account.
"""

from .engine import TradingEngine
from .events import (
    GameOverEvent,
    MarginCalledEvent,
    MarginWarningEvent,
    OrderFilledEvent,
    OrderRejectedEvent,
)
from .slippage import SlippageModel, round_to_tick

__all__ = [
    "GameOverEvent",
    "MarginCalledEvent",
    "MarginWarningEvent",
    "OrderFilledEvent",
    "OrderRejectedEvent",
    "SlippageModel",
    "TradingEngine",
    "round_to_tick",
]
