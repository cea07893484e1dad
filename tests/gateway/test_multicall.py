from __future__ import annotations

import pytest
from eth_abi import encode

from up_metrics.errors import RemoteReadError
from up_metrics.gateway import MulticallGateway, TotalSupply, split_batches
from up_metrics.gateway import multicall as multicall_module

MULTICALL = "0x00000000000000000000000000000000000000c0"
BROKEN = 0xDEAD


def _address(n: int) -> str:
    return f"0x{n:040x}"


class _Aggregate:
    def __init__(self, owner: FakeMulticall, payload):
        self.owner = owner
        self.payload = payload

    def call(self):
        self.owner.batches.append(len(self.payload))
        return_data = []
        for target, _ in self.payload:
            n = int(target, 16)
            if n == BROKEN:
                raise ConnectionError("execution reverted")
            return_data.append(encode(["uint256"], [n * 10]))
        if self.owner.short_results:
            return_data = return_data[:-1]
        return 123, return_data


class FakeMulticall:
    """Answers every ``totalSupply()`` with ten times the target address."""

    def __init__(self):
        self.batches: list[int] = []
        self.short_results = False
        self.functions = self

    def aggregate(self, payload):
        return _Aggregate(self, payload)


@pytest.fixture
def fake_multicall(monkeypatch) -> FakeMulticall:
    fake = FakeMulticall()
    monkeypatch.setattr(
        multicall_module, "get_multicall_contract", lambda w3, address: fake
    )
    return fake


@pytest.fixture
def gateway(fake_multicall) -> MulticallGateway:
    return MulticallGateway("http://localhost:8545", MULTICALL)


def _calls(count: int, start: int = 1) -> list[TotalSupply]:
    return [
        TotalSupply(label=f"supply:{n}", address=_address(n))
        for n in range(start, start + count)
    ]


def test_split_batches_caps_each_batch():
    batches = split_batches(_calls(45), 20)

    assert [len(b) for b in batches] == [20, 20, 5]
    assert [c.label for b in batches for c in b] == [c.label for c in _calls(45)]


def test_split_batches_rejects_non_positive_size():
    with pytest.raises(ValueError):
        split_batches(_calls(3), 0)


@pytest.mark.asyncio
async def test_read_merges_sub_batches_by_label(gateway, fake_multicall):
    results = await gateway.read(_calls(45), batch_size=20)

    assert sorted(fake_multicall.batches) == [5, 20, 20]
    assert len(results) == 45
    assert results["supply:1"] == 10
    assert results["supply:45"] == 450


@pytest.mark.asyncio
async def test_empty_read_issues_no_request(gateway, fake_multicall):
    assert await gateway.read([]) == {}
    assert fake_multicall.batches == []


@pytest.mark.asyncio
async def test_duplicate_labels_are_rejected(gateway):
    calls = [
        TotalSupply(label="same", address=_address(1)),
        TotalSupply(label="same", address=_address(2)),
    ]

    with pytest.raises(ValueError, match="unique"):
        await gateway.read(calls)


@pytest.mark.asyncio
async def test_failing_sub_batch_fails_the_whole_read(gateway):
    calls = [*_calls(25), TotalSupply(label="broken", address=_address(BROKEN))]

    with pytest.raises(RemoteReadError, match="execution reverted"):
        await gateway.read(calls, batch_size=20)


@pytest.mark.asyncio
async def test_result_count_mismatch_is_a_read_failure(gateway, fake_multicall):
    fake_multicall.short_results = True

    with pytest.raises(RemoteReadError, match="returned 2 results for 3 calls"):
        await gateway.aggregate(_calls(3))


@pytest.mark.asyncio
async def test_undecodable_result_is_a_read_failure(gateway, monkeypatch):
    def _garbage(self):
        return 1, [b"\x01"]

    monkeypatch.setattr(_Aggregate, "call", _garbage)

    with pytest.raises(RemoteReadError, match="Failed to decode totalSupply"):
        await gateway.aggregate(_calls(1))
