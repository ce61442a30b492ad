"""Contract catalog: point value and margin per futures contract."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


__all__ = [
    "CONTRACT_SPECS",
    "ContractSpec",
    "ContractType",
    "contract_spec",
]


class ContractType(str, Enum):
    """Tradable contract identifiers (Nasdaq-100 full-size and micro)."""
    NQ = "NQ"
    MNQ = "MNQ"

    @property
    def spec(self) -> "ContractSpec":
        return CONTRACT_SPECS[self]

    @property
    def point_value(self) -> float:
        return self.spec.point_value

    @property
    def margin_requirement(self) -> float:
        return self.spec.margin_requirement

    @classmethod
    def parse(cls, value: "ContractType | str") -> "ContractType":
        """Accept an enum member or its string value (case-insensitive)."""
        if isinstance(value, ContractType):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValueError(
                f"Unknown contract type {value!r}: expected one of "
                f"{', '.join(c.value for c in cls)}"
            ) from exc


@dataclass(frozen=True)
class ContractSpec:
    """
    Static economics of one contract.

    Attributes:
        point_value: Dollars gained or lost per contract per 1.0 price move
        margin_requirement: Dollars of margin held per open contract
    """

    point_value: float
    margin_requirement: float


CONTRACT_SPECS: Mapping[ContractType, ContractSpec] = MappingProxyType(
    {
        ContractType.NQ: ContractSpec(point_value=20.0, margin_requirement=500.0),
        ContractType.MNQ: ContractSpec(point_value=2.0, margin_requirement=50.0),
    }
)


def contract_spec(contract_type: ContractType | str) -> ContractSpec:
    """Look up the spec for a contract type given as enum or string."""
    return CONTRACT_SPECS[ContractType.parse(contract_type)]
