from __future__ import annotations

from .graph import (
    OracleFeed,
    PriceHelperPair,
    build_price_edges,
    build_priced_tokens,
    helper_pair_calls,
    helper_rate,
    oracle_calls,
    with_reciprocals,
)
from .router import find_route, route_price

__all__ = [
    "OracleFeed",
    "PriceHelperPair",
    "build_price_edges",
    "build_priced_tokens",
    "helper_pair_calls",
    "helper_rate",
    "oracle_calls",
    "with_reciprocals",
    "find_route",
    "route_price",
]
