from __future__ import annotations

from .context import MetricsContext, build_context
from .metrics import (
    compute_circulating_supply,
    compute_market_cap,
    compute_tvl,
    compute_up_price,
    require_price,
)

__all__ = [
    "MetricsContext",
    "build_context",
    "compute_circulating_supply",
    "compute_market_cap",
    "compute_tvl",
    "compute_up_price",
    "require_price",
]
