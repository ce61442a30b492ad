from candlepower.events import DomainEvent, event
from candlepower.types import Side


@event
class OrderFilledEvent(DomainEvent):
    side: Side
    contracts: int
    price: float
    contract_type: str
    opening: bool


@event
class OrderRejectedEvent(DomainEvent):
    side: Side
    contracts: int
    contract_type: str
    reason: str


@event
class MarginWarningEvent(DomainEvent):
    """Margin available fell to or below the warning threshold."""

    margin_available: float
    threshold: float


@event
class MarginCalledEvent(DomainEvent):
    """Positions were force-flattened because margin was exceeded."""

    price: float
    realized_balance: float


@event
class GameOverEvent(DomainEvent):
    total_realized_pnl: float
    final_balance: float
