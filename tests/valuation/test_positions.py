from decimal import Decimal

import pytest

from up_metrics.domain import LiquidityPair, Pool, PositionValue, Staking, Token
from up_metrics.errors import DataConsistencyError
from up_metrics.valuation import aggregate_tvl, lp_unit_price, value_position

E18 = 10**18

QUOTE = Token(address="0x00000000000000000000000000000000000000Aa", decimals=18, symbol="Q")
PAIR_ADDRESS = "0x00000000000000000000000000000000000000cc"


def _pool(base: str, quote: str) -> Pool:
    return Pool(
        alias="vault",
        want_address=PAIR_ADDRESS,
        base_symbol=base,
        quote_symbol=quote,
        strategy_address="0x00000000000000000000000000000000000000dd",
    )


def test_single_asset_value_is_price_times_amount():
    staking = Staking(
        alias="stake",
        want_address=QUOTE.address,
        base_symbol="q",
        quote_symbol="Q",
        local_farm="farm",
    )

    value = value_position(staking, QUOTE, Decimal("2.5"), 4 * E18)

    assert value == Decimal("10")


def test_lp_value_keeps_full_precision():
    pair = LiquidityPair(
        address=PAIR_ADDRESS,
        token0=QUOTE.address,
        reserves=(3 * E18, 7 * E18),
        total_supply=4 * E18,
    )

    value = value_position(
        _pool("other", "q"),
        QUOTE,
        Decimal("0.123456789012345678"),
        2 * E18,
        pair,
    )

    assert value == Decimal("0.370370367037037034")


def test_quote_reserve_is_matched_case_insensitively():
    pair_token0_quote = LiquidityPair(
        address=PAIR_ADDRESS,
        token0=QUOTE.address.lower(),
        reserves=(10 * E18, 99 * E18),
        total_supply=20 * E18,
    )
    pair_token1_quote = LiquidityPair(
        address=PAIR_ADDRESS,
        token0="0x00000000000000000000000000000000000000bb",
        reserves=(99 * E18, 10 * E18),
        total_supply=20 * E18,
    )

    assert lp_unit_price(QUOTE, Decimal(3), pair_token0_quote) == Decimal(3)
    assert lp_unit_price(QUOTE, Decimal(3), pair_token1_quote) == Decimal(3)


def test_zero_lp_supply_is_a_consistency_fault():
    pair = LiquidityPair(
        address=PAIR_ADDRESS,
        token0=QUOTE.address,
        reserves=(E18, E18),
        total_supply=0,
    )

    with pytest.raises(DataConsistencyError, match="zero total supply"):
        value_position(_pool("other", "q"), QUOTE, Decimal(1), E18, pair)


def test_paired_position_without_pair_reads_fails():
    with pytest.raises(DataConsistencyError, match="vault"):
        value_position(_pool("other", "q"), QUOTE, Decimal(1), E18)


def test_zero_locked_amount_is_worth_zero():
    assert value_position(_pool("q", "q"), QUOTE, Decimal("1.5"), 0) == 0


def test_lp_value_is_exact_when_share_ratio_does_not_terminate():
    pair = LiquidityPair(
        address=PAIR_ADDRESS,
        token0=QUOTE.address,
        reserves=(1, 5),
        total_supply=6,
    )

    value = value_position(_pool("other", "q"), QUOTE, Decimal(1), 3 * E18, pair)

    assert value == Decimal(1)
    assert aggregate_tvl([PositionValue(alias="vault", tvl=value)]).total == Decimal(
        "1.00000000"
    )
