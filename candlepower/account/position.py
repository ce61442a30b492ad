"""Open lots and the trade log entries they produce."""

from dataclasses import dataclass
from datetime import datetime

from candlepower.contracts import ContractType
from candlepower.types import Side


__all__ = ["Position", "Trade", "pnl_for"]


def pnl_for(
    *,
    side: Side,
    entry_price: float,
    price: float,
    contracts: int,
    contract_type: ContractType,
) -> float:
    """
    Dollar P&L of `contracts` lots entered at `entry_price`, valued at `price`.

    Positive for profit, negative for loss.
    """
    points = price - entry_price
    if side is Side.SHORT:
        points = -points
    return float(points * contracts * contract_type.point_value)


@dataclass
class Position:
    """
    One open lot.

    Only mark-to-market (current_price) and partial closes (contracts) change
    a lot after it has been opened.

    Attributes:
        id: Ledger-assigned identifier
        side: LONG or SHORT
        contracts: Open quantity, always > 0
        entry_price: Fill price of the opening trade
        current_price: Latest mark price
        entry_time: Timestamp of the opening trade
        contract_type: Selects point value and margin
    """

    id: str
    side: Side
    contracts: int
    entry_price: float
    current_price: float
    entry_time: datetime
    contract_type: ContractType = ContractType.MNQ

    def pnl_at(self, price: float) -> float:
        return pnl_for(
            side=self.side,
            entry_price=self.entry_price,
            price=price,
            contracts=self.contracts,
            contract_type=self.contract_type,
        )

    @property
    def unrealized_pnl(self) -> float:
        return self.pnl_at(self.current_price)

    @property
    def margin_required(self) -> float:
        return self.contracts * self.contract_type.margin_requirement


@dataclass(frozen=True)
class Trade:
    """
    Append-only trade log entry.

    contracts is signed: positive for an opening fill, negative for a closing
    fill. side is the side of the lot that was opened or closed.
    """

    id: str
    timestamp: datetime
    side: Side
    contracts: int
    price: float
    realized_pnl: float = 0.0

    @property
    def is_closing(self) -> bool:
        return self.contracts < 0
