from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Sequence

import pytest

from up_metrics.gateway import (
    BalanceOf,
    GetReserves,
    LatestPrice,
    ReadCall,
    Token0,
    TotalSupply,
    WantLockedTotal,
)
from up_metrics.pipeline import MetricsContext, build_context
from up_metrics.settings import MetricsSettings

E18 = 10**18

UP = "0x00000000000000000000000000000000000000a1"
WBNB = "0x00000000000000000000000000000000000000a2"
BUSD = "0x00000000000000000000000000000000000000a3"

MULTICALL = "0x00000000000000000000000000000000000000c0"
BUSD_ORACLE = "0x00000000000000000000000000000000000000b1"
WBNB_ORACLE = "0x00000000000000000000000000000000000000b2"
UP_WBNB_HELPER = "0x00000000000000000000000000000000000000d1"
UP_WBNB_LP = "0x00000000000000000000000000000000000000d2"
BUSD_STRATEGY = "0x00000000000000000000000000000000000000e1"
LP_STRATEGY = "0x00000000000000000000000000000000000000e2"
FARM = "0x00000000000000000000000000000000000000f1"
TREASURY = "0x0000000000000000000000000000000000000101"
TEAM_LOCK = "0x0000000000000000000000000000000000000102"

TOKEN_LIST = {
    "tokens": [
        {"address": UP, "decimals": 18, "symbol": "UP", "name": "UP Token"},
        {"address": WBNB, "decimals": 18, "symbol": "WBNB", "name": "Wrapped BNB"},
        {"address": BUSD, "decimals": 18, "symbol": "BUSD", "name": "BUSD Token"},
    ]
}

PROTOCOL_CONFIG = {
    "multiCall": MULTICALL,
    "oracles": [
        {"token": "busd", "address": BUSD_ORACLE},
        {"token": "wbnb", "address": WBNB_ORACLE},
    ],
    "priceHelper": [
        {"address": UP_WBNB_HELPER, "baseToken": "up", "quoteToken": "wbnb"},
    ],
    "pools": [
        {
            "alias": "busd-vault",
            "wantToken": BUSD,
            "baseToken": "busd",
            "quoteToken": "busd",
            "earnToken": "up",
            "strategy": BUSD_STRATEGY,
        },
        {
            "alias": "up-bnb-vault",
            "wantToken": UP_WBNB_LP,
            "baseToken": "up",
            "quoteToken": "wbnb",
            "earnToken": "up",
            "strategy": LP_STRATEGY,
        },
    ],
    "stakings": [
        {
            "alias": "up-staking",
            "wantToken": UP,
            "baseToken": "up",
            "quoteToken": "up",
            "localFarm": "farm",
            "localFarmPid": 0,
        },
        {
            "alias": "up-bnb-farm",
            "wantToken": UP_WBNB_LP,
            "baseToken": "up",
            "quoteToken": "wbnb",
            "localFarm": "farm",
            "localFarmPid": 1,
        },
    ],
    "localFarms": [{"name": "farm", "address": FARM}],
    "fixSupplyAddresses": [TREASURY, TEAM_LOCK],
}


class FakeChain:
    """In-memory stand-in for the multicall gateway.

    UP is worth 0.01 WBNB through the helper pair and WBNB is 300 BUSD, so
    UP prices at 3.0.
    """

    def __init__(self) -> None:
        self.prices = {
            BUSD_ORACLE: (100_000_000, 8),
            WBNB_ORACLE: (30_000_000_000, 8),
        }
        self.balances = {
            (UP, UP_WBNB_HELPER): 1000 * E18,
            (WBNB, UP_WBNB_HELPER): 10 * E18,
            (UP_WBNB_LP, FARM): 5 * E18,
            (UP, TREASURY): 400_000 * E18,
            (UP, TEAM_LOCK): 100_000 * E18,
        }
        self.supplies = {
            UP_WBNB_LP: 100 * E18,
            FARM: 200 * E18,
            UP: 1_000_000 * E18,
        }
        self.reserves = {UP_WBNB_LP: (1000 * E18, 10 * E18)}
        self.token0 = {UP_WBNB_LP: UP}
        self.locked = {
            BUSD_STRATEGY: 500 * E18,
            LP_STRATEGY: 10 * E18,
        }
        self.reads = 0
        self.batches: list[int] = []
        self.delay = 0.0
        self.fail: Exception | None = None

    def respond(self, call: ReadCall) -> Any:
        address = call.address.lower()
        if isinstance(call, BalanceOf):
            return self.balances.get((address, call.owner.lower()), 0)
        if isinstance(call, TotalSupply):
            return self.supplies[address]
        if isinstance(call, WantLockedTotal):
            return self.locked[address]
        if isinstance(call, GetReserves):
            return self.reserves[address]
        if isinstance(call, Token0):
            return self.token0[address]
        if isinstance(call, LatestPrice):
            return self.prices[address]
        raise AssertionError(f"Unexpected call {call!r}")

    async def read(
        self, calls: Sequence[ReadCall], batch_size: int = 20
    ) -> dict[str, Any]:
        self.reads += 1
        self.batches.append(len(calls))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        return {call.label: self.respond(call) for call in calls}


def write_protocol(base_dir, chain_id: int = 56, suffix: str = "") -> None:
    network_dir = base_dir / f"{chain_id}{suffix}"
    network_dir.mkdir(parents=True, exist_ok=True)
    (network_dir / "tokenlist.json").write_text(json.dumps(TOKEN_LIST))
    (network_dir / "config.json").write_text(json.dumps(PROTOCOL_CONFIG))


@pytest.fixture
def settings(tmp_path) -> MetricsSettings:
    write_protocol(tmp_path)
    return MetricsSettings(data_dir=tmp_path, cache_ttl=10)


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def ctx(settings, chain) -> MetricsContext:
    return build_context(settings, logger=logging.getLogger("test"), gateway=chain)
