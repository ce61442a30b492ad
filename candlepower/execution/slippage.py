"""Fill price model: unfavourable slippage rounded to the contract tick."""

import math
import random
from typing import Protocol, Sequence


__all__ = ["RandomSource", "SlippageModel", "round_to_tick"]


class RandomSource(Protocol):
    def random(self) -> float: ...


def round_to_tick(price: float, tick_size: float = 0.25) -> float:
    """Round price to the nearest tick; exact halves round up."""
    return math.floor(price / tick_size + 0.5) * tick_size


class SlippageModel:
    """
    Moves a reference price against the trader by one of `offsets`, each
    equally likely, then rounds to the tick.

    The random source is injected so fills can be made deterministic:

        model = SlippageModel(rng=random.Random(42))
        model.fill_price(100.0, buying=True)   # 100.25 or 100.5
    """

    def __init__(
        self,
        *,
        rng: RandomSource | None = None,
        offsets: Sequence[float] = (0.25, 0.5),
        tick_size: float = 0.25,
    ) -> None:
        if not offsets:
            raise ValueError("offsets must not be empty")
        self._rng = rng if rng is not None else random.Random()
        self.offsets = tuple(float(o) for o in offsets)
        self.tick_size = float(tick_size)

    def draw_offset(self) -> float:
        index = min(int(self._rng.random() * len(self.offsets)), len(self.offsets) - 1)
        return self.offsets[index]

    def fill_price(self, price: float, *, buying: bool) -> float:
        """Buy fills move up, sell fills move down."""
        offset = self.draw_offset()
        raw = price + offset if buying else price - offset
        return round_to_tick(raw, self.tick_size)
