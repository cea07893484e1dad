"""Depth-bounded, first-match route search over the price graph.

The search starts from a synthetic ``(target, target, 1)`` edge and follows
edges whose base is the current quote token until it reaches a token with a
direct price. Candidates are tried in listed order and the first route found
wins, not the cheapest one.

Each branch receives its own immutable path tuple, so an edge appended while
exploring a failed sibling is never visible to the next sibling.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ..constants import MAX_ROUTE_EDGES
from ..domain import PriceEdge, PricedToken, RouteResult, Token
from ..logger import get_logger

logger = get_logger(__name__)


def _find_priced(token: Token, priced_tokens: Sequence[PricedToken]) -> PricedToken | None:
    for priced in priced_tokens:
        if priced.token == token:
            return priced
    return None


def _search(
    edge: PriceEdge,
    path: tuple[PriceEdge, ...],
    priced_tokens: Sequence[PricedToken],
    edges: Sequence[PriceEdge],
) -> tuple[tuple[PriceEdge, ...], PricedToken] | None:
    # path holds the seed edge plus every real edge before ``edge``
    if len(path) > MAX_ROUTE_EDGES:
        return None

    extended = path + (edge,)
    terminal = _find_priced(edge.quote, priced_tokens)
    if terminal is not None:
        return extended, terminal

    candidates = [
        candidate
        for candidate in edges
        if candidate.base == edge.quote
        and candidate.rate != 0
        and not any(seen.same_pair(candidate) for seen in extended)
    ]
    for candidate in candidates:
        found = _search(candidate, extended, priced_tokens, edges)
        if found is not None:
            return found
    return None


def find_route(
    target: Token,
    priced_tokens: Sequence[PricedToken],
    edges: Sequence[PriceEdge],
) -> RouteResult | None:
    """Find the first route from ``target`` to a priced token.

    Args:
        target: Token to price.
        priced_tokens: Tokens with a direct oracle price.
        edges: Directed price edges, reciprocals included.

    Returns:
        The route (at most ``MAX_ROUTE_EDGES`` edges, seed excluded), or None
        when the target cannot be reached from any priced token.
    """
    seed = PriceEdge(base=target, quote=target, rate=Decimal(1))
    found = _search(seed, (), priced_tokens, edges)
    if found is None:
        return None
    path, terminal = found
    return RouteResult(edges=path[1:], terminal=terminal)


def route_price(
    target: Token,
    priced_tokens: Sequence[PricedToken],
    edges: Sequence[PriceEdge],
) -> Decimal | None:
    """Price of ``target`` in the oracle unit of account, or None if unroutable."""
    route = find_route(target, priced_tokens, edges)
    if route is None:
        logger.error("Can't calc price of %s", target.symbol)
        return None
    price = route.price
    if price is None:
        logger.error(
            "Can't calc price of %s: %s has no oracle price",
            target.symbol,
            route.terminal.token.symbol,
        )
        return None
    logger.debug(
        "Routed %s via %s -> %s",
        target.symbol,
        " -> ".join(edge.quote.symbol for edge in route.edges) or target.symbol,
        price,
    )
    return price
