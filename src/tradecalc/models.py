"""Shared data models for the trade calculation engine.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class OrderSide(str, Enum):
    """Order direction. Buy opens a long, sell opens a short on margin."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Order type. Limit orders pay the maker rate, market orders the taker rate."""

    MARKET = "market"
    LIMIT = "limit"


@dataclass(frozen=True)
class TradeRequest:
    """Order parameters for a single trade calculation.

    ``amount`` is base-denominated except for market buys, where it is the
    quote amount to spend. ``hot_token_amount`` is the raw 18-decimal
    balance of the fee-discount token.
    """

    order_type: OrderType
    side: OrderSide
    price: Decimal
    amount: Decimal
    price_decimals: int
    amount_decimals: int
    as_maker_fee_rate: Decimal = Decimal("0")
    as_taker_fee_rate: Decimal = Decimal("0")
    gas_fee_amount: Decimal = Decimal("0")
    hot_token_amount: Decimal | None = None
    is_margin: bool = False
    leverage: Decimal = Decimal("1")
    market_liquidation_threshold: Decimal = Decimal("1.15")


@dataclass(frozen=True)
class TradeResult:
    """Fully derived outcome of a trade calculation.

    All quote-denominated fields are in quote units; ``total_base_tokens``
    is in base units. A zero ``estimated_liquidation_price`` means the
    price could not be computed, not that the position is safe.
    """

    subtotal: Decimal  # Pre-fee quote value of the trade
    total_base_tokens: Decimal
    estimated_price: Decimal  # Zero for limit orders
    fee_rate: Decimal
    fee_rate_after_discount: Decimal
    trade_fee: Decimal
    trade_fee_after_discount: Decimal
    hot_discount: Decimal  # Multiplier applied to the fee (0.7 = 30% off)
    is_maker_fee: bool
    gas_fee_amount: Decimal
    total_quote_tokens: Decimal  # Paid (buy) or netted (sell), never negative
    is_margin: bool
    leverage: Decimal
    user_collateral_committed: Decimal
    borrowed_amount: Decimal
    estimated_liquidation_price: Decimal

    @property
    def total_position_value(self) -> Decimal:
        """Full value of the position, collateral plus borrowed."""
        return self.subtotal
