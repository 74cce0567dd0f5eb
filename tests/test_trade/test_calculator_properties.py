"""Invariant checks for the trade calculator across order combinations.

Each test sweeps a small grid of sides, order types and leverages rather
than single worked examples.
"""

import itertools
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from tradecalc.fees.discount import parse_discount_rules
from tradecalc.models import OrderSide, OrderType
from tradecalc.trade.calculator import compute

WEI = Decimal(10) ** 18

SIDES = [OrderSide.BUY, OrderSide.SELL]
ORDER_TYPES = [OrderType.LIMIT, OrderType.MARKET]
LEVERAGES = [Decimal("1"), Decimal("2"), Decimal("3"), Decimal("7.5")]


class TestDeterminism:
    def test_repeated_calls_identical(self, make_request, discount_tiers) -> None:
        request = make_request(
            amount=Decimal("3.14159"),
            price=Decimal("271.828"),
            is_margin=True,
            leverage=Decimal("3"),
            as_maker_fee_rate=Decimal("0.001"),
            hot_token_amount=42 * WEI,
        )
        first = compute(request, discount_tiers)
        for _ in range(5):
            assert compute(request, discount_tiers) == first

    def test_concurrent_calls_identical(self, make_request, discount_tiers) -> None:
        """Results do not depend on which thread computes them."""
        request = make_request(
            amount=Decimal("1"),
            price=Decimal("3"),
            price_decimals=2,
            is_margin=True,
            leverage=Decimal("3"),
        )
        expected = compute(request, discount_tiers)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: compute(request, discount_tiers), range(64)))
        assert all(result == expected for result in results)


class TestNonNegativity:
    @pytest.mark.parametrize(
        ("side", "order_type", "leverage"),
        list(itertools.product(SIDES, ORDER_TYPES, LEVERAGES)),
    )
    def test_total_quote_never_negative(
        self, make_request, side: OrderSide, order_type: OrderType, leverage: Decimal
    ) -> None:
        """Gas fee far larger than the trade still reports zero, not a debt."""
        request = make_request(
            side=side,
            order_type=order_type,
            price=Decimal("0.5"),
            amount=Decimal("1"),
            gas_fee_amount=Decimal("1000"),
            as_maker_fee_rate=Decimal("0.5"),
            as_taker_fee_rate=Decimal("0.5"),
            is_margin=True,
            leverage=leverage,
        )
        assert compute(request, ()).total_quote_tokens >= Decimal("0")


class TestCollateralSplit:
    @pytest.mark.parametrize("side", SIDES)
    @pytest.mark.parametrize("leverage", [Decimal("2"), Decimal("3"), Decimal("7"), Decimal("9.9")])
    @pytest.mark.parametrize("amount", [Decimal("1"), Decimal("0.37"), Decimal("12.5")])
    def test_split_sums_to_subtotal(
        self, make_request, side: OrderSide, leverage: Decimal, amount: Decimal
    ) -> None:
        """collateral + borrowed is within one price unit of subtotal."""
        request = make_request(
            side=side,
            price=Decimal("33.33"),
            amount=amount,
            price_decimals=2,
            is_margin=True,
            leverage=leverage,
        )
        result = compute(request, ())
        gap = abs(result.user_collateral_committed + result.borrowed_amount - result.subtotal)
        assert gap <= Decimal("0.01")
        assert result.user_collateral_committed * leverage >= result.subtotal


class TestDiscountMonotonicity:
    def test_more_tokens_never_raise_fee_rate(self, make_request) -> None:
        """Table with non-increasing multipliers: fee rate falls as balance grows."""
        tiers = parse_discount_rules(
            [["10", "1"], ["100", "0.9"], ["1000", "0.8"], ["-1", "0.7"]]
        )
        balances = [0, 5, 10, 11, 99, 100, 101, 999, 1000, 5000, 10**6]

        rates = [
            compute(
                make_request(
                    as_maker_fee_rate=Decimal("0.001"),
                    hot_token_amount=Decimal(balance) * WEI,
                ),
                tiers,
            ).fee_rate_after_discount
            for balance in balances
        ]

        assert all(later <= earlier for earlier, later in zip(rates, rates[1:]))
        assert rates[0] == Decimal("0.001")
        assert rates[-1] == Decimal("0.0007")
