"""Public entry point for computing protocol metrics."""

from __future__ import annotations

from decimal import Decimal

from .cache import ResultCache
from .constants import MARKET_CAP_CACHE_KEY, PRICE_CACHE_KEY, TVL_CACHE_KEY
from .domain import TvlReport
from .logger import get_logger
from .pipeline import (
    MetricsContext,
    build_context,
    compute_circulating_supply,
    compute_market_cap,
    compute_tvl,
    compute_up_price,
)
from .settings import MetricsSettings

logger = get_logger(__name__)


class MetricsClient:
    """Computes TVL, reference token price and market cap for one network.

    Each metric is memoized for ``settings.cache_ttl`` seconds. Pass
    ``use_cache=False`` to force a fresh on-chain read.
    """

    def __init__(
        self,
        settings: MetricsSettings | None = None,
        context: MetricsContext | None = None,
        cache: ResultCache | None = None,
    ):
        if context is None:
            context = build_context(settings or MetricsSettings(), logger=logger)
        self.context = context
        self.settings = context.settings
        self.cache = cache or ResultCache(
            ttl=self.settings.cache_ttl,
            check_period=self.settings.cache_check_period,
        )

    async def tvl(self, use_cache: bool = True) -> TvlReport:
        if not use_cache:
            return await compute_tvl(self.context)
        return await self.cache.remember(
            TVL_CACHE_KEY, lambda: compute_tvl(self.context)
        )

    async def up_price(self, use_cache: bool = True) -> Decimal:
        if not use_cache:
            return await compute_up_price(self.context)
        return await self.cache.remember(
            PRICE_CACHE_KEY, lambda: compute_up_price(self.context)
        )

    async def market_cap(self, use_cache: bool = True) -> Decimal:
        if not use_cache:
            return await compute_market_cap(self.context)
        return await self.cache.remember(
            MARKET_CAP_CACHE_KEY, lambda: compute_market_cap(self.context)
        )

    async def circulating_supply(self) -> int:
        return await compute_circulating_supply(self.context)
