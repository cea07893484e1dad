from __future__ import annotations

from .aggregator import aggregate_tvl, circulating_supply, market_cap
from .positions import lp_unit_price, value_position

__all__ = [
    "aggregate_tvl",
    "circulating_supply",
    "market_cap",
    "lp_unit_price",
    "value_position",
]
