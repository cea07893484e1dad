from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Sequence

from ..constants import DISPLAY_DECIMALS
from ..domain import PositionValue, TvlReport
from ..errors import DataConsistencyError
from ..units import exact_context, floor_places, from_wad, to_decimal


def aggregate_tvl(values: Sequence[PositionValue]) -> TvlReport:
    """Sum position values exactly, flooring only the displayed figures."""
    with exact_context():
        total = sum((v.tvl for v in values), Decimal(0))
    return TvlReport(
        total=floor_places(total, DISPLAY_DECIMALS),
        detail=tuple(
            PositionValue(alias=v.alias, tvl=floor_places(v.tvl, DISPLAY_DECIMALS))
            for v in values
        ),
    )


def circulating_supply(total_supply: int, excluded_balances: Mapping[str, int]) -> int:
    """Total supply minus balances held at excluded addresses.

    Raises:
        DataConsistencyError: If the excluded balances exceed the total supply.
    """
    remaining = total_supply
    for address, balance in excluded_balances.items():
        if balance > remaining:
            raise DataConsistencyError(
                f"Excluded balance {balance} at {address} exceeds remaining supply {remaining}"
            )
        remaining -= balance
    return remaining


def market_cap(price: Decimal, supply: int) -> Decimal:
    """Price times circulating supply (18-decimal raw units)."""
    with exact_context():
        return from_wad(price * to_decimal(supply))
