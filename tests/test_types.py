import pytest

from candlepower.types import Side


def test_opposite():
    assert Side.LONG.opposite() is Side.SHORT
    assert Side.SHORT.opposite() is Side.LONG


def test_to_order_side():
    assert Side.LONG.to_order_side() == "BUY"
    assert Side.SHORT.to_order_side() == "SELL"


def test_from_order_side_is_case_insensitive():
    assert Side.from_order_side("buy") is Side.LONG
    assert Side.from_order_side("SELL") is Side.SHORT


def test_from_order_side_rejects_unknown():
    with pytest.raises(ValueError, match="must be BUY or SELL"):
        Side.from_order_side("HOLD")
