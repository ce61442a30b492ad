from .ledger import AccountSnapshot, TradingAccount
from .position import Position, Trade, pnl_for

__all__ = [
    "AccountSnapshot",
    "Position",
    "Trade",
    "TradingAccount",
    "pnl_for",
]
