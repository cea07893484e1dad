from __future__ import annotations

import asyncio
from typing import Any, Sequence

from eth_typing import URI
from web3 import Web3
from web3.contract import Contract

from ..abi import load_multicall_abi
from ..constants import MULTICALL_BATCH_SIZE
from ..errors import RemoteReadError
from ..logger import get_logger
from .calls import ReadCall

logger = get_logger(__name__)


def get_multicall_contract(w3: Web3, multicall_address: str) -> Contract:
    checksum_address = Web3.to_checksum_address(multicall_address)
    return w3.eth.contract(address=checksum_address, abi=load_multicall_abi())


def split_batches(
    calls: Sequence[ReadCall], batch_size: int = MULTICALL_BATCH_SIZE
) -> list[list[ReadCall]]:
    """Split ``calls`` into consecutive chunks of at most ``batch_size``."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [
        list(calls[i : i + batch_size]) for i in range(0, len(calls), batch_size)
    ]


class MulticallGateway:
    """Runs typed view calls through a Multicall ``aggregate`` contract."""

    def __init__(self, rpc_url: str, multicall_address: str):
        self.rpc_url = rpc_url
        self.w3 = Web3(Web3.HTTPProvider(URI(rpc_url)))
        self.multicall: Contract = get_multicall_contract(self.w3, multicall_address)

    async def aggregate(self, calls: Sequence[ReadCall]) -> dict[str, Any]:
        """Execute ``calls`` in a single multicall request.

        Returns:
            Mapping of call label to decoded result.

        Raises:
            RemoteReadError: If the request or any decode fails.
        """
        payload = [
            (Web3.to_checksum_address(call.address), call.encode()) for call in calls
        ]
        try:
            _, return_data = await asyncio.to_thread(
                self.multicall.functions.aggregate(payload).call
            )
        except Exception as e:
            raise RemoteReadError(
                f"Multicall of {len(calls)} calls failed: {e}"
            ) from e

        if len(return_data) != len(calls):
            raise RemoteReadError(
                f"Multicall returned {len(return_data)} results for {len(calls)} calls"
            )

        results: dict[str, Any] = {}
        for call, data in zip(calls, return_data):
            try:
                results[call.label] = call.decode(data)
            except Exception as e:
                raise RemoteReadError(
                    f"Failed to decode {call.signature} at {call.address}: {e}"
                ) from e
        return results

    async def read(
        self,
        calls: Sequence[ReadCall],
        batch_size: int = MULTICALL_BATCH_SIZE,
    ) -> dict[str, Any]:
        """Execute ``calls`` as concurrent sub-batches and merge by label.

        Any failing sub-batch fails the whole read; nothing is retried.
        """
        labels = [call.label for call in calls]
        if len(set(labels)) != len(labels):
            raise ValueError("Call labels must be unique within a read")
        if not calls:
            return {}

        batches = split_batches(calls, batch_size)
        logger.debug(
            "Reading %d calls in %d multicall batches", len(calls), len(batches)
        )
        responses = await asyncio.gather(*(self.aggregate(b) for b in batches))

        merged: dict[str, Any] = {}
        for response in responses:
            merged.update(response)
        return merged

    async def chain_id(self) -> int:
        return await asyncio.to_thread(lambda: self.w3.eth.chain_id)
