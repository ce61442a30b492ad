from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SimulatorConfig:
    starting_balance: float = 5000.0
    commission_per_contract: float = 2.50
    margin_warning_threshold: float = 1000.0
    tick_size: float = 0.25
    slippage_offsets: tuple[float, ...] = (0.25, 0.5)
    slippage_seed: int | None = None
    market_close_hour: int = 16
    market_timezone: str = "America/New_York"
    warm_up_candles: int = 250
    log_level: str | None = None

    def __post_init__(self) -> None:
        if self.starting_balance <= 0:
            raise ValueError("starting_balance must be > 0")
        if self.commission_per_contract < 0:
            raise ValueError("commission_per_contract must be >= 0")
        if self.tick_size <= 0:
            raise ValueError("tick_size must be > 0")
        if not self.slippage_offsets:
            raise ValueError("slippage_offsets must not be empty")
        if any(o < 0 for o in self.slippage_offsets):
            raise ValueError("slippage_offsets must be >= 0")
        if not 0 <= self.market_close_hour <= 24:
            raise ValueError("market_close_hour must be within 0..24")
        if self.warm_up_candles < 0:
            raise ValueError("warm_up_candles must be >= 0")
        if self.log_level is not None and self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None = None) -> SimulatorConfig:
        """Validate and construct from a raw config mapping.

        Missing keys take their defaults. Raises ``ValueError`` with a clear
        message on bad values instead of letting ``TypeError`` propagate.
        """
        raw = dict(raw or {})
        defaults = cls()

        def _num(key: str, conv):
            value = raw.get(key, getattr(defaults, key))
            try:
                return conv(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"simulator.{key} is not numeric: {value!r}") from exc

        offsets = raw.get("slippage_offsets", defaults.slippage_offsets)
        try:
            offsets = tuple(float(o) for o in offsets)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"simulator.slippage_offsets must be a list of numbers: {offsets!r}"
            ) from exc

        log_level = raw.get("log_level", defaults.log_level)

        seed = raw.get("slippage_seed", defaults.slippage_seed)
        if seed is not None:
            seed = _num("slippage_seed", int)

        return cls(
            starting_balance=_num("starting_balance", float),
            commission_per_contract=_num("commission_per_contract", float),
            margin_warning_threshold=_num("margin_warning_threshold", float),
            tick_size=_num("tick_size", float),
            slippage_offsets=offsets,
            slippage_seed=seed,
            market_close_hour=_num("market_close_hour", int),
            market_timezone=str(raw.get("market_timezone", defaults.market_timezone)),
            warm_up_candles=_num("warm_up_candles", int),
            log_level=None if log_level is None else str(log_level),
        )
