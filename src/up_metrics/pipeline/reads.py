"""Read groups issued against the gateway for one metric computation."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..domain import LiquidityPair, Pool, Position, PriceEdge, PricedToken
from ..errors import DataConsistencyError
from ..gateway import BalanceOf, GetReserves, ReadCall, Token0, TotalSupply, WantLockedTotal
from ..pricing import (
    build_price_edges,
    build_priced_tokens,
    helper_pair_calls,
    oracle_calls,
)
from .context import MetricsContext

TOTAL_SUPPLY_LABEL = "totalSupply"


def _result(results: Mapping[str, Any], label: str) -> Any:
    try:
        return results[label]
    except KeyError:
        raise DataConsistencyError(f"Missing read result for '{label}'") from None


async def fetch_priced_tokens(ctx: MetricsContext) -> list[PricedToken]:
    feeds = ctx.oracle_feeds()
    results = await ctx.gateway.read(oracle_calls(feeds), ctx.batch_size)
    priced = build_priced_tokens(feeds, results)
    ctx.logger.debug("Fetched %d oracle prices", len(priced))
    return priced


async def fetch_price_edges(ctx: MetricsContext) -> list[PriceEdge]:
    pairs = ctx.price_helpers()
    results = await ctx.gateway.read(helper_pair_calls(pairs), ctx.batch_size)
    edges = build_price_edges(pairs, results)
    ctx.logger.debug("Built %d price edges from %d helper pairs", len(edges), len(pairs))
    return edges


def lp_addresses(positions: Sequence[Position]) -> list[str]:
    """Distinct want-token addresses of paired positions, first-seen order."""
    seen: dict[str, str] = {}
    for position in positions:
        if not position.is_single_asset:
            seen.setdefault(position.want_address.lower(), position.want_address)
    return list(seen.values())


async def fetch_liquidity_pairs(
    ctx: MetricsContext, addresses: Sequence[str]
) -> dict[str, LiquidityPair]:
    """Read token0, reserves and total supply of each pair, keyed by lowercase address."""
    calls: list[ReadCall] = []
    for address in addresses:
        calls.append(Token0(label=f"{address}token0", address=address))
        calls.append(GetReserves(label=f"{address}getReserves", address=address))
        calls.append(TotalSupply(label=f"{address}totalSupply", address=address))

    results = await ctx.gateway.read(calls, ctx.batch_size)

    pairs: dict[str, LiquidityPair] = {}
    for address in addresses:
        reserve0, reserve1 = _result(results, f"{address}getReserves")
        pairs[address.lower()] = LiquidityPair(
            address=address,
            token0=str(_result(results, f"{address}token0")),
            reserves=(int(reserve0), int(reserve1)),
            total_supply=int(_result(results, f"{address}totalSupply")),
        )
    return pairs


def locked_amount_call(ctx: MetricsContext, position: Position, label: str) -> ReadCall:
    """Call reporting how much of ``position``'s want asset is locked.

    Pools ask their strategy. Stakings of the reference token read the farm's
    total supply; other stakings read the want token balance of the farm.
    """
    if isinstance(position, Pool):
        return WantLockedTotal(label=label, address=position.strategy_address)

    farm_address = ctx.protocol.local_farm_address(position.local_farm)
    reference = ctx.settings.reference_token.lower()
    if (
        position.base_symbol.lower() == reference
        and position.quote_symbol.lower() == reference
    ):
        return TotalSupply(label=label, address=farm_address)
    return BalanceOf(label=label, address=position.want_address, owner=farm_address)


async def fetch_locked_amounts(
    ctx: MetricsContext, positions: Sequence[Position]
) -> list[int]:
    """Locked want amounts, index-aligned with ``positions``."""
    labels = [f"locked:{i}:{p.alias}" for i, p in enumerate(positions)]
    calls = [locked_amount_call(ctx, p, label) for p, label in zip(positions, labels)]
    results = await ctx.gateway.read(calls, ctx.batch_size)
    return [int(_result(results, label)) for label in labels]


async def fetch_supply(ctx: MetricsContext) -> tuple[int, dict[str, int]]:
    """Reference token total supply and balances at the excluded addresses."""
    token = ctx.reference_token
    excluded = ctx.protocol.fix_supply_addresses
    calls: list[ReadCall] = [TotalSupply(label=TOTAL_SUPPLY_LABEL, address=token.address)]
    calls.extend(
        BalanceOf(label=address, address=token.address, owner=address)
        for address in excluded
    )
    results = await ctx.gateway.read(calls, ctx.batch_size)
    total = int(_result(results, TOTAL_SUPPLY_LABEL))
    balances = {address: int(_result(results, address)) for address in excluded}
    return total, balances
