from __future__ import annotations

from .calls import (
    BalanceOf,
    GetReserves,
    LatestPrice,
    ReadCall,
    Token0,
    TotalSupply,
    WantLockedTotal,
)
from .multicall import MulticallGateway, split_batches

__all__ = [
    "BalanceOf",
    "GetReserves",
    "LatestPrice",
    "ReadCall",
    "Token0",
    "TotalSupply",
    "WantLockedTotal",
    "MulticallGateway",
    "split_batches",
]
