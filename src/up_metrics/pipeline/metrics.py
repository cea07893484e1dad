"""The three public metrics: TVL, reference token price, market cap."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Sequence

from ..domain import PositionValue, PriceEdge, PricedToken, Token, TvlReport
from ..errors import PriceUnavailableError
from ..pricing import route_price
from ..valuation import aggregate_tvl, circulating_supply, market_cap, value_position
from .context import MetricsContext
from .reads import (
    fetch_liquidity_pairs,
    fetch_locked_amounts,
    fetch_price_edges,
    fetch_priced_tokens,
    fetch_supply,
    lp_addresses,
)


def require_price(
    target: Token,
    priced_tokens: Sequence[PricedToken],
    edges: Sequence[PriceEdge],
) -> Decimal:
    """Route ``target`` to a priced token or raise PriceUnavailableError."""
    price = route_price(target, priced_tokens, edges)
    if price is None:
        raise PriceUnavailableError(target)
    return price


async def compute_tvl(ctx: MetricsContext) -> TvlReport:
    """Value every pool and staking position and sum them.

    Oracle prices, helper-pair balances, LP pair reads and locked amounts are
    read concurrently; any failing group fails the computation.
    """
    log = ctx.logger
    positions = ctx.positions()
    log.info("Computing TVL for %d positions...", len(positions))

    priced_tokens, edges, pairs, locked_amounts = await asyncio.gather(
        fetch_priced_tokens(ctx),
        fetch_price_edges(ctx),
        fetch_liquidity_pairs(ctx, lp_addresses(positions)),
        fetch_locked_amounts(ctx, positions),
    )

    quote_prices: dict[Token, Decimal] = {}
    values: list[PositionValue] = []
    for position, locked in zip(positions, locked_amounts):
        quote_token = ctx.token(position.quote_symbol)
        if quote_token not in quote_prices:
            quote_prices[quote_token] = require_price(quote_token, priced_tokens, edges)
            if quote_token.decimals != 18:
                log.warning(
                    "%s has %d decimals but amounts are normalized by 1e18",
                    quote_token.symbol,
                    quote_token.decimals,
                )

        value = value_position(
            position,
            quote_token,
            quote_prices[quote_token],
            locked,
            pairs.get(position.want_address.lower()),
        )
        log.debug("Position %s valued at %s", position.alias, value)
        values.append(PositionValue(alias=position.alias, tvl=value))

    report = aggregate_tvl(values)
    log.info("TVL: %s", report.total)
    return report


async def compute_up_price(ctx: MetricsContext) -> Decimal:
    """Full-precision price of the reference token."""
    priced_tokens, edges = await asyncio.gather(
        fetch_priced_tokens(ctx),
        fetch_price_edges(ctx),
    )
    price = require_price(ctx.reference_token, priced_tokens, edges)
    ctx.logger.info("%s price: %s", ctx.reference_token.symbol, price)
    return price


async def compute_circulating_supply(ctx: MetricsContext) -> int:
    """Raw circulating supply of the reference token."""
    total, excluded = await fetch_supply(ctx)
    return circulating_supply(total, excluded)


async def compute_market_cap(ctx: MetricsContext) -> Decimal:
    price, supply = await asyncio.gather(
        compute_up_price(ctx),
        compute_circulating_supply(ctx),
    )
    cap = market_cap(price, supply)
    ctx.logger.info("Market cap: %s", cap)
    return cap
