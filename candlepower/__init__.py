"""
CandlePower - futures trading simulator core.

Folds a 1-minute candle stream into 5- and 15-minute charts and executes
market orders against a margined account with slippage, commission,
netting and forced liquidation.
"""

from .config import SimulatorConfig
from .contracts import CONTRACT_SPECS, ContractSpec, ContractType
from .events import EventDispatcher
from .marketdata import Candle, CandleAggregator
from .account import TradingAccount
from .execution import TradingEngine
from .session import TradingSession
from .types import Side

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CONTRACT_SPECS",
    "Candle",
    "CandleAggregator",
    "ContractSpec",
    "ContractType",
    "EventDispatcher",
    "Side",
    "SimulatorConfig",
    "TradingAccount",
    "TradingEngine",
    "TradingSession",
]
