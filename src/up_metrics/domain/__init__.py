"""Domain models for price routing and position valuation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from typing import Union

from ..units import exact_context


@dataclass(frozen=True, eq=False)
class Token:
    """ERC20 token identity. Equal iff addresses match case-insensitively."""

    address: str
    decimals: int
    symbol: str
    name: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.address.lower() == other.address.lower()

    def __hash__(self) -> int:
        return hash(self.address.lower())


@dataclass(frozen=True)
class PriceEdge:
    """One unit of ``base`` is worth ``rate`` units of ``quote``."""

    base: Token
    quote: Token
    rate: Decimal

    def same_pair(self, other: PriceEdge) -> bool:
        return self.base == other.base and self.quote == other.quote

    def reciprocal(self) -> PriceEdge:
        """Return the reverse edge; a zero rate stays zero."""
        if self.rate == 0:
            return PriceEdge(base=self.quote, quote=self.base, rate=Decimal(0))
        with exact_context():
            rate = Decimal(1) / self.rate
        return PriceEdge(base=self.quote, quote=self.base, rate=rate)


@dataclass(frozen=True)
class PricedToken:
    """A token with a direct oracle price, or None when the feed has none."""

    token: Token
    price: Decimal | None


@dataclass(frozen=True)
class RouteResult:
    """Edges chaining a target token to a priced token, in path order."""

    edges: tuple[PriceEdge, ...]
    terminal: PricedToken

    @property
    def rate(self) -> Decimal:
        with exact_context():
            return reduce(lambda acc, edge: acc * edge.rate, self.edges, Decimal(1))

    @property
    def price(self) -> Decimal | None:
        if self.terminal.price is None:
            return None
        with exact_context():
            return self.terminal.price * self.rate


@dataclass(frozen=True)
class Pool:
    """Vault pool whose strategy contract reports ``wantLockedTotal``."""

    alias: str
    want_address: str
    base_symbol: str
    quote_symbol: str
    strategy_address: str

    @property
    def is_single_asset(self) -> bool:
        return self.base_symbol.lower() == self.quote_symbol.lower()


@dataclass(frozen=True)
class Staking:
    """Staking position held by a local reward farm."""

    alias: str
    want_address: str
    base_symbol: str
    quote_symbol: str
    local_farm: str
    local_farm_pid: int = 0

    @property
    def is_single_asset(self) -> bool:
        return self.base_symbol.lower() == self.quote_symbol.lower()


Position = Union[Pool, Staking]


@dataclass(frozen=True)
class LiquidityPair:
    """Reserve and supply reads of an AMM pair contract."""

    address: str
    token0: str
    reserves: tuple[int, int]
    total_supply: int

    def reserve_of(self, token: Token) -> int:
        """Return the reserve slot holding ``token``."""
        if self.token0.lower() == token.address.lower():
            return self.reserves[0]
        return self.reserves[1]


@dataclass(frozen=True)
class PositionValue:
    alias: str
    tvl: Decimal


@dataclass(frozen=True)
class TvlReport:
    """Total value locked plus the per-position breakdown."""

    total: Decimal
    detail: tuple[PositionValue, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "total": str(self.total),
            "detail": [{"alias": v.alias, "tvl": str(v.tvl)} for v in self.detail],
        }


__all__ = [
    "Token",
    "PriceEdge",
    "PricedToken",
    "RouteResult",
    "Pool",
    "Staking",
    "Position",
    "LiquidityPair",
    "PositionValue",
    "TvlReport",
]
