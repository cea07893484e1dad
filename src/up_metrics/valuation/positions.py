from __future__ import annotations

from decimal import Decimal

from ..domain import LiquidityPair, Position, Token
from ..errors import DataConsistencyError
from ..units import WAD, exact_context, from_wad, to_decimal


def _require_supply(pair: LiquidityPair) -> Decimal:
    if pair.total_supply == 0:
        raise DataConsistencyError(f"LP pair {pair.address} reports zero total supply")
    return to_decimal(pair.total_supply)


def lp_unit_price(quote_token: Token, quote_price: Decimal, pair: LiquidityPair) -> Decimal:
    """Fair price of one LP share, assuming value-balanced reserves.

    price = quote_price * quote_reserve * 2 / total_supply
    """
    supply = _require_supply(pair)
    reserve = to_decimal(pair.reserve_of(quote_token))
    with exact_context():
        return quote_price * reserve * 2 / supply


def value_position(
    position: Position,
    quote_token: Token,
    quote_price: Decimal,
    locked_amount: int,
    pair: LiquidityPair | None = None,
) -> Decimal:
    """Value ``locked_amount`` (18-decimal raw units) of a position's want asset.

    Single-asset positions use the quote price directly. Paired positions are
    valued as ``P * reserve * 2 * locked / (supply * 1e18)`` with a single
    final division.
    """
    locked = to_decimal(locked_amount)
    if position.is_single_asset:
        with exact_context():
            return from_wad(quote_price * locked)

    if pair is None:
        raise DataConsistencyError(f"Missing LP pair reads for position {position.alias}")
    supply = _require_supply(pair)
    reserve = to_decimal(pair.reserve_of(quote_token))
    with exact_context():
        return quote_price * reserve * 2 * locked / (supply * WAD)
