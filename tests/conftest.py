"""Shared test fixtures for the trade calculation engine."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from tradecalc.config import MarketSettings
from tradecalc.fees.discount import DiscountTier, parse_discount_rules
from tradecalc.models import OrderSide, OrderType, TradeRequest
from tradecalc.trade.calculator import TradeCalculator


@pytest.fixture
def market() -> MarketSettings:
    """HOT-DAI market: 0.1% maker, 0.2% taker, 8-decimal precision."""
    return MarketSettings(
        base_token="HOT",
        quote_token="DAI",
        as_maker_fee_rate=Decimal("0.001"),
        as_taker_fee_rate=Decimal("0.002"),
        gas_fee_amount=Decimal("0"),
        price_decimals=8,
        amount_decimals=8,
        base_token_decimals=18,
        quote_token_decimals=18,
        liquidation_threshold=Decimal("1.15"),
        min_order_size=Decimal("1"),
    )


@pytest.fixture
def discount_tiers() -> tuple[DiscountTier, ...]:
    """Two-tier table: 30% off up to 100 tokens, full fee above."""
    return parse_discount_rules([["100", "0.7"], ["-1", "1"]])


@pytest.fixture
def calculator(discount_tiers: tuple[DiscountTier, ...]) -> TradeCalculator:
    """TradeCalculator bound to the two-tier discount table."""
    return TradeCalculator(discount_tiers)


@pytest.fixture
def make_request() -> Callable[..., TradeRequest]:
    """Factory for a limit buy of 2 @ 100 with no fees; override fields by keyword."""

    def _make(**overrides) -> TradeRequest:
        fields = {
            "order_type": OrderType.LIMIT,
            "side": OrderSide.BUY,
            "price": Decimal("100"),
            "amount": Decimal("2"),
            "price_decimals": 8,
            "amount_decimals": 8,
        }
        fields.update(overrides)
        return TradeRequest(**fields)

    return _make
