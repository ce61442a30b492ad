"""Order execution and margin enforcement."""

import logging
import random
from dataclasses import replace
from datetime import datetime, timezone
from numbers import Integral
from typing import Optional

from candlepower.account.ledger import AccountSnapshot, TradingAccount
from candlepower.config import SimulatorConfig
from candlepower.contracts import ContractType
from candlepower.events import DomainEvent, EventDispatcher
from candlepower.execution.events import (
    GameOverEvent,
    MarginCalledEvent,
    MarginWarningEvent,
    OrderFilledEvent,
    OrderRejectedEvent,
)
from candlepower.execution.slippage import RandomSource, SlippageModel
from candlepower.types import Side

log = logging.getLogger(__name__)


__all__ = ["TradingEngine"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TradingEngine:
    """
    Executes market orders against a TradingAccount and enforces margin.

    Order flow for buy/sell:
      1. Reject if there is no market price yet, or if the account cannot
         margin the full requested size.
      2. If margin is already exceeded, force a flatten instead (margin call).
      3. Net the order against opposite-side lots, oldest first, each close
         filled with its own slippage draw and commission.
      4. Open a new lot for any remainder that can still be margined.
      5. Re-evaluate the margin warning latch.

    Insufficient margin never raises; the order (or its remainder) is dropped
    and an OrderRejectedEvent is published.

    Observable flags:
      margin_called   edge-triggered, cleared by acknowledge_margin_call()
      margin_warning  level-triggered latch on margin_available <= threshold
      game_over       sticky until reset()
    """

    def __init__(
        self,
        *,
        config: Optional[SimulatorConfig] = None,
        account: Optional[TradingAccount] = None,
        rng: Optional[RandomSource] = None,
        dispatcher: Optional[EventDispatcher] = None,
    ) -> None:
        self.config = config or SimulatorConfig()
        self.account = account or TradingAccount(self.config.starting_balance)
        if rng is None:
            rng = random.Random(self.config.slippage_seed)
        self.slippage = SlippageModel(
            rng=rng,
            offsets=self.config.slippage_offsets,
            tick_size=self.config.tick_size,
        )
        self.dispatcher = dispatcher or EventDispatcher()

        self.current_price: float = 0.0
        self.margin_called: bool = False
        self.margin_warning: bool = False
        self.game_over: bool = False
        self._version = 0

    # ------------------------------------------------------------------
    # Order intents
    # ------------------------------------------------------------------

    def buy(
        self,
        contracts: int,
        price: float,
        timestamp: datetime,
        contract_type: ContractType | str = ContractType.MNQ,
    ) -> None:
        self._execute(Side.LONG, contracts, price, timestamp, contract_type)

    def sell(
        self,
        contracts: int,
        price: float,
        timestamp: datetime,
        contract_type: ContractType | str = ContractType.MNQ,
    ) -> None:
        self._execute(Side.SHORT, contracts, price, timestamp, contract_type)

    def flatten(self, price: float, timestamp: datetime) -> float:
        """
        Close every open lot at price, without slippage or commission.

        Returns:
            Total realized P&L of the closed lots
        """
        total = 0.0
        for position in self.account.positions:
            total += self.account.close_position(position, price, timestamp)
        self.margin_warning = False
        self._touch()
        return total

    def update_price(self, price: float, timestamp: Optional[datetime] = None) -> None:
        """Per-tick entry point: mark to market, then enforce margin."""
        self.current_price = float(price)
        self.account.update_position_prices(self.current_price)
        self._check_margin_warning()

        if self.account.is_margin_exceeded:
            log.warning("Margin exceeded after price update at %.2f, flattening positions", price)
            self._margin_call(price, timestamp or _now())
        self._touch()

    def acknowledge_margin_call(self) -> None:
        self.margin_called = False
        self._touch()

    def end_session(self, timestamp: Optional[datetime] = None) -> None:
        """Flatten at the last mark price and latch game over."""
        ts = timestamp or _now()
        if self.current_price > 0:
            self.flatten(self.current_price, ts)
        self.game_over = True
        self._touch()
        log.info(
            "Session over: realized P&L %.2f, final balance %.2f",
            self.account.total_realized_pnl,
            self.account.realized_balance,
        )
        self._publish(
            GameOverEvent(
                timestamp=ts,
                total_realized_pnl=self.account.total_realized_pnl,
                final_balance=self.account.realized_balance,
            )
        )

    def reset(self) -> None:
        self.account.reset()
        self.current_price = 0.0
        self.margin_called = False
        self.margin_warning = False
        self.game_over = False
        self._touch()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Bumped on every state change; poll it to detect updates."""
        return self._version

    @property
    def total_realized_pnl(self) -> float:
        return self.account.total_realized_pnl

    def snapshot(self) -> AccountSnapshot:
        return replace(
            self.account.snapshot(),
            current_price=self.current_price,
            margin_called=self.margin_called,
            margin_warning=self.margin_warning,
            game_over=self.game_over,
            version=self._version,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(
        self,
        side: Side,
        contracts: int,
        price: float,
        timestamp: datetime,
        contract_type: ContractType | str,
    ) -> None:
        if isinstance(contracts, bool) or not isinstance(contracts, Integral) or contracts <= 0:
            raise ValueError(f"contracts must be a positive integer, got {contracts!r}")
        contracts = int(contracts)
        ctype = ContractType.parse(contract_type)
        account = self.account

        if self.game_over:
            self._reject(side, contracts, ctype, "session is over", timestamp)
            return

        if price <= 0:
            self._reject(side, contracts, ctype, "no market price", timestamp)
            return

        # Gates on the full size even when part of it will net.
        if not account.can_open_position(contracts, ctype):
            self._reject(side, contracts, ctype, "insufficient margin", timestamp)
            return

        if account.is_margin_exceeded:
            log.warning("Margin exceeded, flattening positions")
            self._margin_call(price, timestamp)
            self._touch()
            return

        buying = side is Side.LONG
        remaining = contracts

        for position in account.positions_for(side.opposite()):
            if remaining <= 0:
                break
            close_price = self.slippage.fill_price(price, buying=buying)
            to_close = min(position.contracts, remaining)
            self._charge_commission(to_close)
            account.reduce_position(position, to_close, close_price, timestamp)
            remaining -= to_close
            self._publish(
                OrderFilledEvent(
                    timestamp=timestamp,
                    side=side,
                    contracts=to_close,
                    price=close_price,
                    contract_type=position.contract_type.value,
                    opening=False,
                )
            )

        if remaining > 0:
            if account.can_open_position(remaining, ctype):
                fill_price = self.slippage.fill_price(price, buying=buying)
                self._charge_commission(remaining)
                account.open_position(side, remaining, fill_price, timestamp, ctype)
                log.debug("Opened %s %d %s @ %.2f", side.value, remaining, ctype.value, fill_price)
                self._publish(
                    OrderFilledEvent(
                        timestamp=timestamp,
                        side=side,
                        contracts=remaining,
                        price=fill_price,
                        contract_type=ctype.value,
                        opening=True,
                    )
                )
            else:
                self._reject(side, remaining, ctype, "insufficient margin for remainder", timestamp)

        self._check_margin_warning()
        self._touch()

    def _charge_commission(self, contracts: int) -> None:
        self.account.apply_commission(contracts * self.config.commission_per_contract)

    def _margin_call(self, price: float, timestamp: datetime) -> None:
        self.margin_called = True
        self.flatten(price, timestamp)
        self._publish(
            MarginCalledEvent(
                timestamp=timestamp,
                price=float(price),
                realized_balance=self.account.realized_balance,
            )
        )

    def _check_margin_warning(self) -> None:
        available = self.account.margin_available
        threshold = self.config.margin_warning_threshold
        if available <= threshold:
            if not self.margin_warning:
                self.margin_warning = True
                log.warning("Margin warning: %.2f available (threshold %.2f)", available, threshold)
                self._publish(MarginWarningEvent(margin_available=available, threshold=threshold))
        else:
            self.margin_warning = False

    def _reject(
        self,
        side: Side,
        contracts: int,
        contract_type: ContractType,
        reason: str,
        timestamp: datetime,
    ) -> None:
        log.warning(
            "Rejected %s %d %s contracts: %s",
            side.to_order_side(), contracts, contract_type.value, reason,
        )
        self._publish(
            OrderRejectedEvent(
                timestamp=timestamp,
                side=side,
                contracts=contracts,
                contract_type=contract_type.value,
                reason=reason,
            )
        )

    def _publish(self, event: DomainEvent) -> None:
        self.dispatcher.publish(event)

    def _touch(self) -> None:
        self._version += 1
