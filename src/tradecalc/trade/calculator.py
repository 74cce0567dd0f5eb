"""Trade and margin calculation for spot and leveraged orders.

All calculations use Decimal arithmetic exclusively -- no float conversions anywhere.

Calculation flow (single pass, no state):
1. Subtotal in quote and base quantity, depending on order type and side
2. Fee rate (maker for limit, taker for market) and discount-token multiplier
3. Margin split into committed collateral and borrowed amount, plus the
   estimated liquidation price, when trading on margin with leverage > 1
4. Spot totals otherwise
5. Clamp the quote total at zero

Rounding directions:
  - subtotal, base quantity, borrowed amount: DOWN
  - committed collateral: UP (never under-state the requirement)
  - buy totals: UP, sell totals: DOWN
  - long liquidation price: UP, short liquidation price: DOWN

The short-side liquidation price divides quote-denominated collateral by
the base quantity times the threshold with no price conversion. It is an
approximation kept for parity with the exchange's order form.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from tradecalc.fees.discount import DiscountTier, lookup_discount
from tradecalc.logging import get_logger
from tradecalc.models import OrderSide, OrderType, TradeRequest, TradeResult
from tradecalc.precision import CALC_CONTEXT, round_down, round_up

if TYPE_CHECKING:
    from tradecalc.config import DiscountSettings

logger = get_logger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")


def compute(request: TradeRequest, discount_tiers: Sequence[DiscountTier]) -> TradeResult:
    """Derive fees, totals, margin split and liquidation price for an order.

    Performs no input validation. Upstream form validation is expected to
    reject non-numeric or out-of-range values; degenerate input (zero
    price, zero amount) produces zero-valued output rather than an error.

    Args:
        request: Order parameters.
        discount_tiers: Parsed fee-discount tiers in evaluation order.

    Returns:
        Fully derived TradeResult.
    """
    with localcontext(CALC_CONTEXT):
        return _compute(request, discount_tiers)


def _compute(request: TradeRequest, discount_tiers: Sequence[DiscountTier]) -> TradeResult:
    price = request.price
    amount = request.amount
    leverage = request.leverage
    threshold = request.market_liquidation_threshold
    gas_fee = request.gas_fee_amount
    price_decimals = request.price_decimals
    is_buy = request.side == OrderSide.BUY

    estimated_price = ZERO

    if request.order_type == OrderType.MARKET and is_buy:
        # Market buy: amount is the quote amount to spend
        subtotal = round_down(amount, price_decimals)
        if price > ZERO:
            total_base_tokens = round_down(amount / price, request.amount_decimals)
        else:
            total_base_tokens = ZERO
        estimated_price = price
    else:
        subtotal = round_down(amount * price, price_decimals)
        total_base_tokens = amount
        if request.order_type == OrderType.MARKET:
            estimated_price = price

    is_maker_fee = request.order_type == OrderType.LIMIT
    fee_rate = request.as_maker_fee_rate if is_maker_fee else request.as_taker_fee_rate
    hot_discount = lookup_discount(request.hot_token_amount, discount_tiers)

    trade_fee = subtotal * fee_rate
    trade_fee_after_discount = trade_fee * hot_discount
    fee_rate_after_discount = fee_rate * hot_discount

    estimated_liquidation_price = ZERO

    if request.is_margin and leverage > ONE:
        collateral = round_up(subtotal / leverage, price_decimals)
        borrowed = round_down(subtotal - collateral, price_decimals)

        if is_buy:
            total_quote_tokens = round_up(
                collateral + trade_fee_after_discount + gas_fee, price_decimals
            )
            # Long: debt in quote, liquidated when position value falls to
            # borrowed * threshold
            if total_base_tokens > ZERO and threshold > ZERO:
                estimated_liquidation_price = round_up(
                    borrowed * threshold / total_base_tokens, price_decimals
                )
        else:
            total_quote_tokens = round_down(
                collateral - trade_fee_after_discount - gas_fee, price_decimals
            )
            # Short: debt in base, liquidated when debt value * threshold
            # exceeds collateral
            if total_base_tokens > ZERO and threshold > ZERO and leverage > ZERO:
                estimated_liquidation_price = round_down(
                    collateral / (total_base_tokens * threshold), price_decimals
                )
    else:
        collateral = subtotal
        borrowed = ZERO
        if is_buy:
            total_quote_tokens = round_up(
                subtotal + trade_fee_after_discount + gas_fee, price_decimals
            )
        else:
            total_quote_tokens = round_down(
                subtotal - trade_fee_after_discount - gas_fee, price_decimals
            )

    total_quote_tokens = max(total_quote_tokens, ZERO)

    return TradeResult(
        subtotal=subtotal,
        total_base_tokens=total_base_tokens,
        estimated_price=estimated_price,
        fee_rate=fee_rate,
        fee_rate_after_discount=fee_rate_after_discount,
        trade_fee=trade_fee,
        trade_fee_after_discount=trade_fee_after_discount,
        hot_discount=hot_discount,
        is_maker_fee=is_maker_fee,
        gas_fee_amount=gas_fee,
        total_quote_tokens=total_quote_tokens,
        is_margin=request.is_margin,
        leverage=leverage,
        user_collateral_committed=collateral,
        borrowed_amount=borrowed,
        estimated_liquidation_price=estimated_liquidation_price,
    )


class TradeCalculator:
    """Computes trade results against a fixed discount table.

    Binds the fee-discount tiers loaded from settings so callers only pass
    the per-order request. Safe to share across threads: holds no mutable
    state.

    Args:
        discount_tiers: Parsed fee-discount tiers in evaluation order.
    """

    def __init__(self, discount_tiers: Sequence[DiscountTier] = ()) -> None:
        self._tiers = tuple(discount_tiers)

    @classmethod
    def from_settings(cls, settings: DiscountSettings) -> TradeCalculator:
        """Build a calculator from the configured discount rule table."""
        tiers = settings.tiers()
        logger.info("discount_tiers_loaded", tier_count=len(tiers))
        return cls(tiers)

    @property
    def discount_tiers(self) -> tuple[DiscountTier, ...]:
        return self._tiers

    def compute(self, request: TradeRequest) -> TradeResult:
        """Compute a TradeResult for the request using the bound tiers."""
        result = compute(request, self._tiers)
        logger.debug(
            "trade_computed",
            order_type=request.order_type.value,
            side=request.side.value,
            is_margin=request.is_margin,
            leverage=request.leverage,
            subtotal=result.subtotal,
            total_quote=result.total_quote_tokens,
            hot_discount=result.hot_discount,
            liquidation_price=result.estimated_liquidation_price,
        )
        return result
