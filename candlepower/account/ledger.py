"""Position/account ledger: owns lots, the trade log and realized cash."""

import itertools
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from candlepower.account.position import Position, Trade, pnl_for
from candlepower.contracts import ContractType
from candlepower.types import Side

log = logging.getLogger(__name__)


__all__ = ["AccountSnapshot", "TradingAccount"]


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of the account for presentation layers."""

    realized_balance: float
    unrealized_pnl: float
    total_balance: float
    total_margin_required: float
    margin_available: float
    positions: tuple[Position, ...]
    average_long_entry_price: Optional[float]
    average_short_entry_price: Optional[float]
    total_long_contracts: int
    total_short_contracts: int
    current_price: float = 0.0
    margin_called: bool = False
    margin_warning: bool = False
    game_over: bool = False
    version: int = 0


class TradingAccount:
    """
    Ledger of open lots, trades and realized balance.

    Every account-level figure is derived on demand from the owned state:

        total_balance    = realized_balance + sum(unrealized P&L)
        margin_available = total_balance - total_margin_required

    Lots are held in an id-indexed dict so partial closes mutate in place;
    dict insertion order keeps lots in the order they were opened.
    """

    def __init__(self, starting_balance: float = 5000.0) -> None:
        self.starting_balance = float(starting_balance)
        self.realized_balance: float = self.starting_balance
        self._positions: dict[str, Position] = {}
        self._trades: list[Trade] = []
        self._position_ids = itertools.count(1)
        self._trade_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def positions(self) -> tuple[Position, ...]:
        return tuple(self._positions.values())

    @property
    def trade_history(self) -> tuple[Trade, ...]:
        return tuple(self._trades)

    def get_position(self, position_id: str) -> Optional[Position]:
        return self._positions.get(position_id)

    def positions_for(self, side: Side) -> list[Position]:
        return [p for p in self._positions.values() if p.side is side]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def open_position(
        self,
        side: Side,
        contracts: int,
        price: float,
        timestamp: datetime,
        contract_type: ContractType = ContractType.MNQ,
    ) -> Position:
        """Open a new lot; same-side lots are never merged."""
        position = Position(
            id=f"POS-{next(self._position_ids)}",
            side=side,
            contracts=int(contracts),
            entry_price=float(price),
            current_price=float(price),
            entry_time=timestamp,
            contract_type=contract_type,
        )
        self._positions[position.id] = position
        self._record_trade(timestamp, side, position.contracts, position.entry_price)
        return position

    def close_position(
        self, position: Position | str, at_price: float, timestamp: datetime
    ) -> float:
        """
        Close a whole lot at at_price and bank its P&L.

        Returns:
            Realized P&L, or 0.0 when the lot is no longer open
        """
        position_id = position if isinstance(position, str) else position.id
        lot = self._positions.pop(position_id, None)
        if lot is None:
            return 0.0

        pnl = lot.pnl_at(at_price)
        self.realized_balance += pnl
        self._record_trade(timestamp, lot.side, -lot.contracts, at_price, pnl)
        return pnl

    def reduce_position(
        self,
        position: Position | str,
        contracts: int,
        at_price: float,
        timestamp: datetime,
    ) -> float:
        """
        Close part of a lot at at_price, banking P&L on the closed part only.

        Reducing by the whole size closes the lot.

        Returns:
            Realized P&L of the closed part, or 0.0 when the lot is not open
        """
        position_id = position if isinstance(position, str) else position.id
        lot = self._positions.get(position_id)
        if lot is None:
            return 0.0
        if contracts <= 0:
            raise ValueError(f"contracts to close must be > 0, got {contracts}")
        if contracts >= lot.contracts:
            return self.close_position(position_id, at_price, timestamp)

        pnl = pnl_for(
            side=lot.side,
            entry_price=lot.entry_price,
            price=at_price,
            contracts=contracts,
            contract_type=lot.contract_type,
        )
        self.realized_balance += pnl
        self._record_trade(timestamp, lot.side, -contracts, at_price, pnl)
        lot.contracts -= contracts
        return pnl

    def update_position_prices(self, current_price: float) -> None:
        """Mark every open lot to current_price."""
        price = float(current_price)
        for lot in self._positions.values():
            lot.current_price = price

    def apply_commission(self, amount: float) -> None:
        self.realized_balance -= float(amount)

    def reset(self) -> None:
        self._positions.clear()
        self._trades.clear()
        self.realized_balance = self.starting_balance
        self._position_ids = itertools.count(1)
        self._trade_ids = itertools.count(1)

    def _record_trade(
        self,
        timestamp: datetime,
        side: Side,
        contracts: int,
        price: float,
        realized_pnl: float = 0.0,
    ) -> Trade:
        trade = Trade(
            id=f"TRD-{next(self._trade_ids)}",
            timestamp=timestamp,
            side=side,
            contracts=int(contracts),
            price=float(price),
            realized_pnl=float(realized_pnl),
        )
        self._trades.append(trade)
        log.debug(
            "Trade %s: %s %+d @ %.2f pnl=%.2f",
            trade.id, side.value, trade.contracts, trade.price, trade.realized_pnl,
        )
        return trade

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    @property
    def unrealized_pnl(self) -> float:
        return float(sum(p.unrealized_pnl for p in self._positions.values()))

    def unrealized_pnl_for(self, side: Side) -> float:
        return float(sum(p.unrealized_pnl for p in self.positions_for(side)))

    @property
    def total_balance(self) -> float:
        return self.realized_balance + self.unrealized_pnl

    @property
    def realized_gain(self) -> float:
        return self.realized_balance - self.starting_balance

    @property
    def total_realized_pnl(self) -> float:
        """Sum of banked trade P&L; excludes commission."""
        return float(sum(t.realized_pnl for t in self._trades))

    @property
    def total_margin_required(self) -> float:
        return float(sum(p.margin_required for p in self._positions.values()))

    @property
    def margin_available(self) -> float:
        return self.total_balance - self.total_margin_required

    def total_contracts(self, side: Side) -> int:
        return sum(p.contracts for p in self.positions_for(side))

    def average_entry_price(self, side: Side) -> Optional[float]:
        """Contracts-weighted mean entry over all lots of side; None if flat."""
        lots = self.positions_for(side)
        total = sum(p.contracts for p in lots)
        if total <= 0:
            return None
        return sum(p.contracts * p.entry_price for p in lots) / total

    @property
    def average_long_entry_price(self) -> Optional[float]:
        return self.average_entry_price(Side.LONG)

    @property
    def average_short_entry_price(self) -> Optional[float]:
        return self.average_entry_price(Side.SHORT)

    @property
    def total_long_contracts(self) -> int:
        return self.total_contracts(Side.LONG)

    @property
    def total_short_contracts(self) -> int:
        return self.total_contracts(Side.SHORT)

    @property
    def unrealized_long_pnl(self) -> float:
        return self.unrealized_pnl_for(Side.LONG)

    @property
    def unrealized_short_pnl(self) -> float:
        return self.unrealized_pnl_for(Side.SHORT)

    def can_open_position(
        self, contracts: int, contract_type: ContractType | str = ContractType.MNQ
    ) -> bool:
        additional = contracts * ContractType.parse(contract_type).margin_requirement
        return self.margin_available >= additional

    @property
    def is_margin_exceeded(self) -> bool:
        return self.total_margin_required > self.total_balance

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            realized_balance=self.realized_balance,
            unrealized_pnl=self.unrealized_pnl,
            total_balance=self.total_balance,
            total_margin_required=self.total_margin_required,
            margin_available=self.margin_available,
            positions=tuple(replace(p) for p in self._positions.values()),
            average_long_entry_price=self.average_long_entry_price,
            average_short_entry_price=self.average_short_entry_price,
            total_long_contracts=self.total_long_contracts,
            total_short_contracts=self.total_short_contracts,
        )
