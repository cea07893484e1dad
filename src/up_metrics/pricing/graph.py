"""Build priced tokens and price edges from oracle and helper-pair reads."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Sequence

from ..domain import PriceEdge, PricedToken, Token
from ..errors import DataConsistencyError
from ..gateway import BalanceOf, LatestPrice, ReadCall
from ..units import exact_context, scale_down, to_decimal


@dataclass(frozen=True)
class OracleFeed:
    """Oracle contract reporting the price of ``token``."""

    token: Token
    address: str


@dataclass(frozen=True)
class PriceHelperPair:
    """AMM pair whose balances relate ``base`` to ``quote``."""

    address: str
    base: Token
    quote: Token


def _result(results: Mapping[str, Any], label: str) -> Any:
    try:
        return results[label]
    except KeyError:
        raise DataConsistencyError(f"Missing read result for '{label}'") from None


def oracle_label(feed: OracleFeed) -> str:
    return f"oracle:{feed.token.symbol.lower()}"


def helper_labels(pair: PriceHelperPair) -> tuple[str, str]:
    return f"{pair.address}-0", f"{pair.address}-1"


def oracle_calls(feeds: Sequence[OracleFeed]) -> list[ReadCall]:
    return [LatestPrice(label=oracle_label(f), address=f.address) for f in feeds]


def helper_pair_calls(pairs: Sequence[PriceHelperPair]) -> list[ReadCall]:
    """Two ``balanceOf(pair)`` calls per helper: base token then quote token."""
    calls: list[ReadCall] = []
    for pair in pairs:
        base_label, quote_label = helper_labels(pair)
        calls.append(
            BalanceOf(label=base_label, address=pair.base.address, owner=pair.address)
        )
        calls.append(
            BalanceOf(label=quote_label, address=pair.quote.address, owner=pair.address)
        )
    return calls


def build_priced_tokens(
    feeds: Sequence[OracleFeed], results: Mapping[str, Any]
) -> list[PricedToken]:
    """Oracle price = mantissa / 10**decimals, decimals as reported per call."""
    priced: list[PricedToken] = []
    for feed in feeds:
        mantissa, decimals = _result(results, oracle_label(feed))
        priced.append(PricedToken(token=feed.token, price=scale_down(mantissa, decimals)))
    return priced


def helper_rate(base_amount: int, quote_amount: int) -> Decimal:
    """Quote units per base unit; 0 when the pair holds no base token."""
    base = to_decimal(base_amount)
    if base == 0:
        return Decimal(0)
    with exact_context():
        return to_decimal(quote_amount) / base


def build_price_edges(
    pairs: Sequence[PriceHelperPair], results: Mapping[str, Any]
) -> list[PriceEdge]:
    """One edge per helper pair, followed by all reciprocal edges."""
    forward: list[PriceEdge] = []
    for pair in pairs:
        base_label, quote_label = helper_labels(pair)
        rate = helper_rate(_result(results, base_label), _result(results, quote_label))
        forward.append(PriceEdge(base=pair.base, quote=pair.quote, rate=rate))
    return with_reciprocals(forward)


def with_reciprocals(edges: Sequence[PriceEdge]) -> list[PriceEdge]:
    return [*edges, *(edge.reciprocal() for edge in edges)]
