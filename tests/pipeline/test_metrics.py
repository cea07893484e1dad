"""Metric computations against the in-memory chain from conftest."""

from __future__ import annotations

from decimal import Decimal

import pytest

from up_metrics.errors import (
    DataConsistencyError,
    PriceUnavailableError,
    RemoteReadError,
)
from up_metrics.gateway import BalanceOf, TotalSupply, WantLockedTotal
from up_metrics.pipeline import (
    compute_circulating_supply,
    compute_market_cap,
    compute_tvl,
    compute_up_price,
)
from up_metrics.pipeline.reads import lp_addresses, locked_amount_call

E18 = 10**18


@pytest.mark.asyncio
async def test_tvl_values_every_position(ctx, chain):
    report = await compute_tvl(ctx)

    assert {v.alias: v.tvl for v in report.detail} == {
        "busd-vault": Decimal("500"),
        "up-bnb-vault": Decimal("600"),
        "up-staking": Decimal("600"),
        "up-bnb-farm": Decimal("300"),
    }
    assert report.total == Decimal("2000")
    assert [v.alias for v in report.detail] == [
        "busd-vault",
        "up-bnb-vault",
        "up-staking",
        "up-bnb-farm",
    ]
    assert chain.reads == 4


@pytest.mark.asyncio
async def test_up_price_routes_through_helper_pair(ctx, chain):
    price = await compute_up_price(ctx)

    assert price == Decimal("3")
    assert chain.reads == 2


@pytest.mark.asyncio
async def test_circulating_supply_excludes_fixed_addresses(ctx):
    assert await compute_circulating_supply(ctx) == 500_000 * E18


@pytest.mark.asyncio
async def test_market_cap(ctx, chain):
    cap = await compute_market_cap(ctx)

    assert cap == Decimal("1500000")
    assert chain.reads == 3


@pytest.mark.asyncio
async def test_unroutable_price_fails_the_metric(ctx, chain, caplog):
    up = ctx.token("up")
    helper = ctx.protocol.price_helpers[0].address
    chain.balances[(up.address, helper)] = 0

    with pytest.raises(PriceUnavailableError, match="Can't calc price of UP") as exc:
        await compute_up_price(ctx)

    assert exc.value.token == up
    assert "Can't calc price of UP" in caplog.text


@pytest.mark.asyncio
async def test_tvl_fails_when_a_quote_token_is_unpriced(ctx, chain):
    up = ctx.token("up")
    helper = ctx.protocol.price_helpers[0].address
    chain.balances[(up.address, helper)] = 0

    with pytest.raises(PriceUnavailableError):
        await compute_tvl(ctx)


@pytest.mark.asyncio
async def test_read_failure_propagates(ctx, chain):
    chain.fail = RemoteReadError("Multicall of 2 calls failed: timeout")

    with pytest.raises(RemoteReadError, match="timeout"):
        await compute_tvl(ctx)


@pytest.mark.asyncio
async def test_oversupplied_exclusions_fail_market_cap(ctx, chain):
    chain.supplies[ctx.token("up").address] = 100 * E18

    with pytest.raises(DataConsistencyError, match="exceeds remaining supply"):
        await compute_market_cap(ctx)


def test_reference_token_staking_reads_farm_supply(ctx):
    staking = next(p for p in ctx.positions() if p.alias == "up-staking")
    farm = ctx.protocol.local_farm_address("farm")

    call = locked_amount_call(ctx, staking, "locked")

    assert isinstance(call, TotalSupply)
    assert call.address == farm


def test_lp_staking_reads_want_balance_of_farm(ctx):
    staking = next(p for p in ctx.positions() if p.alias == "up-bnb-farm")
    farm = ctx.protocol.local_farm_address("farm")

    call = locked_amount_call(ctx, staking, "locked")

    assert isinstance(call, BalanceOf)
    assert call.address == staking.want_address
    assert call.owner == farm


def test_pool_reads_strategy_locked_total(ctx):
    pool = ctx.positions()[0]

    call = locked_amount_call(ctx, pool, "locked")

    assert isinstance(call, WantLockedTotal)
    assert call.address == pool.strategy_address


def test_lp_addresses_are_deduplicated(ctx):
    addresses = lp_addresses(ctx.positions())

    assert addresses == [ctx.protocol.pools[1].want_token]
