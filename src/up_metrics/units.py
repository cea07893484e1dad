from __future__ import annotations

from contextlib import contextmanager
from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Iterator

# Enough significant digits for uint256 products (e.g. reserve * price * 2).
DECIMAL_PRECISION = 100

WAD = Decimal(10**18)


@contextmanager
def exact_context() -> Iterator[None]:
    """Evaluate decimal arithmetic with enough precision for on-chain amounts."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        yield


def to_decimal(value: int | str | Decimal) -> Decimal:
    """Convert a raw on-chain integer to a Decimal without touching float.

    Args:
        value: Raw integer amount (or its string form) as decoded from a call.

    Returns:
        The same amount as an exact Decimal.

    Raises:
        TypeError: If ``value`` is a float.
    """
    if isinstance(value, float):
        raise TypeError("Refusing to build a Decimal from a float")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def scale_down(mantissa: int, decimals: int) -> Decimal:
    """Return ``mantissa / 10**decimals`` as an exact Decimal."""
    with exact_context():
        return to_decimal(mantissa) / (Decimal(10) ** decimals)


def from_wad(value: Decimal) -> Decimal:
    """Remove the 18-decimal on-chain scaling from ``value``."""
    with exact_context():
        return value / WAD


def floor_places(value: Decimal, places: int = 8) -> Decimal:
    """Floor ``value`` to ``places`` decimal places (toward negative infinity)."""
    with exact_context():
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_FLOOR)
