"""Simulator-wide trading types."""

from enum import Enum


class Side(str, Enum):
    """Side of a position.

    A buy order opens or adds to LONG exposure and closes SHORT lots; a sell
    order does the reverse.
    """
    LONG = "long"
    SHORT = "short"

    def opposite(self) -> "Side":
        """Return the opposite side."""
        return Side.SHORT if self is Side.LONG else Side.LONG

    def to_order_side(self) -> str:
        """
        Convert side to order side string (BUY/SELL).

        Returns:
            "BUY" for LONG, "SELL" for SHORT
        """
        return "BUY" if self is Side.LONG else "SELL"

    @classmethod
    def from_order_side(cls, side: str) -> "Side":
        """
        Convert order side string (BUY/SELL) to a position side.
        """
        if side.upper() == "BUY":
            return Side.LONG
        elif side.upper() == "SELL":
            return Side.SHORT
        else:
            raise ValueError(f"Invalid order side {side}: must be BUY or SELL")
