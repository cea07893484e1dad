"""Typed read-only contract calls understood by the multicall gateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address


@dataclass(frozen=True)
class ReadCall:
    """A single view call. ``label`` keys its decoded result."""

    label: str
    address: str

    signature: ClassVar[str]
    input_types: ClassVar[tuple[str, ...]] = ()
    output_types: ClassVar[tuple[str, ...]]

    def args(self) -> tuple[Any, ...]:
        return ()

    def encode(self) -> bytes:
        selector = function_signature_to_4byte_selector(self.signature)
        return selector + encode(list(self.input_types), list(self.args()))

    def decode(self, data: bytes) -> Any:
        values = decode(list(self.output_types), data)
        return self.shape(values)

    def shape(self, values: Sequence[Any]) -> Any:
        """Single outputs are unwrapped, multiple outputs stay a tuple."""
        if len(values) == 1:
            return values[0]
        return tuple(values)


@dataclass(frozen=True)
class BalanceOf(ReadCall):
    """``token.balanceOf(owner)``; ``address`` is the token contract."""

    owner: str

    signature: ClassVar[str] = "balanceOf(address)"
    input_types: ClassVar[tuple[str, ...]] = ("address",)
    output_types: ClassVar[tuple[str, ...]] = ("uint256",)

    def args(self) -> tuple[Any, ...]:
        return (to_checksum_address(self.owner),)


@dataclass(frozen=True)
class TotalSupply(ReadCall):
    signature: ClassVar[str] = "totalSupply()"
    output_types: ClassVar[tuple[str, ...]] = ("uint256",)


@dataclass(frozen=True)
class WantLockedTotal(ReadCall):
    signature: ClassVar[str] = "wantLockedTotal()"
    output_types: ClassVar[tuple[str, ...]] = ("uint256",)


@dataclass(frozen=True)
class Token0(ReadCall):
    signature: ClassVar[str] = "token0()"
    output_types: ClassVar[tuple[str, ...]] = ("address",)


@dataclass(frozen=True)
class GetReserves(ReadCall):
    """UniswapV2-style ``getReserves``; decodes to ``(reserve0, reserve1)``."""

    signature: ClassVar[str] = "getReserves()"
    output_types: ClassVar[tuple[str, ...]] = ("uint112", "uint112", "uint32")

    def shape(self, values: Sequence[Any]) -> tuple[int, int]:
        return int(values[0]), int(values[1])


@dataclass(frozen=True)
class LatestPrice(ReadCall):
    """Oracle ``getLatestPrice``; decodes to ``(mantissa, decimals)``."""

    signature: ClassVar[str] = "getLatestPrice()"
    output_types: ClassVar[tuple[str, ...]] = ("uint256", "uint8")

    def shape(self, values: Sequence[Any]) -> tuple[int, int]:
        return int(values[0]), int(values[1])
