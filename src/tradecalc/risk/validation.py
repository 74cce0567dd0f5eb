"""Pre-submission order validation.

Runs after the calculator, on the request and its TradeResult, and reports
problems as per-field messages instead of raising: insufficient balances
and non-positive prices are ordinary user input, not programming errors.

Non-numeric price, amount or leverage is reported first and excludes that
field from every later comparison. Balance checks then run before the
price/amount sanity checks, so a sanity failure replaces a balance message
on the same field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from tradecalc.config import MarketSettings, ValidationSettings
from tradecalc.logging import get_logger
from tradecalc.models import OrderSide, TradeRequest, TradeResult
from tradecalc.precision import available_balance

logger = get_logger(__name__)

DISPLAY_PLACES = 5


@dataclass(frozen=True)
class AccountBalances:
    """Token balances in smallest units (e.g. wei).

    Locked amounts are held by open orders and are not spendable.
    """

    quote_balance: Decimal
    base_balance: Decimal
    quote_locked: Decimal = Decimal("0")
    base_locked: Decimal = Decimal("0")


@dataclass
class OrderValidation:
    """Outcome of validate_order.

    ``errors`` block submission; ``warnings`` are informational.
    Both map a form field name to a message.
    """

    errors: dict[str, str] = field(default_factory=dict)
    warnings: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _fmt(value: Decimal, places: int) -> str:
    return str(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _check_balances(
    request: TradeRequest,
    result: TradeResult,
    balances: AccountBalances,
    market: MarketSettings,
    errors: dict[str, str],
) -> None:
    quote_available = available_balance(
        balances.quote_balance, balances.quote_locked, market.quote_token_decimals
    )

    if request.is_margin:
        # Collateral is always posted in the quote token, long or short
        collateral = result.user_collateral_committed
        if collateral > quote_available:
            errors["amount"] = (
                f"Insufficient {market.quote_token} for collateral. "
                f"Need {_fmt(collateral, DISPLAY_PLACES)}, "
                f"have {_fmt(quote_available, DISPLAY_PLACES)}"
            )
    elif request.side == OrderSide.BUY:
        if result.total_quote_tokens > quote_available:
            errors["amount"] = (
                f"Insufficient {market.quote_token} balance. "
                f"Need {_fmt(result.total_quote_tokens, DISPLAY_PLACES)}, "
                f"have {_fmt(quote_available, DISPLAY_PLACES)}"
            )
    else:
        base_available = available_balance(
            balances.base_balance, balances.base_locked, market.base_token_decimals
        )
        if request.amount > base_available:
            errors["amount"] = (
                f"Insufficient {market.base_token} balance. "
                f"Trying to sell {_fmt(request.amount, DISPLAY_PLACES)}, "
                f"have {_fmt(base_available, DISPLAY_PLACES)}"
            )


def _check_liquidation_proximity(
    request: TradeRequest,
    result: TradeResult,
    warning_margin: Decimal,
    warnings: dict[str, str],
) -> None:
    liquidation_price = result.estimated_liquidation_price
    price = request.price
    if liquidation_price <= 0 or price <= 0:
        return

    # Short estimates sit below entry by construction, so only longs are checked
    if request.side != OrderSide.BUY:
        return

    if liquidation_price >= price * (Decimal("1") - warning_margin):
        warnings["leverage"] = (
            f"Estimated liquidation price {liquidation_price} is within "
            f"{warning_margin * 100}% of the order price {price}"
        )


def validate_order(
    request: TradeRequest,
    result: TradeResult,
    market: MarketSettings,
    balances: AccountBalances | None = None,
    settings: ValidationSettings | None = None,
) -> OrderValidation:
    """Validate an order against market limits and account balances.

    Args:
        request: The order parameters passed to the calculator.
        result: The calculator's result for ``request``.
        market: Market settings (token symbols, decimals, min order size).
        balances: Account balances, or None when no wallet is connected,
            in which case balance checks are skipped.
        settings: Validation thresholds. Defaults to ValidationSettings().

    Returns:
        OrderValidation with per-field errors and warnings.
    """
    settings = settings or ValidationSettings()
    validation = OrderValidation()
    errors = validation.errors

    price = Decimal(request.price)
    amount = Decimal(request.amount)
    leverage = Decimal(request.leverage)
    price_is_number = not price.is_nan()
    amount_is_number = not amount.is_nan()

    if balances is not None and price_is_number and amount_is_number:
        _check_balances(request, result, balances, market, errors)

    if not price_is_number:
        errors["price"] = "Price must be a number"
    elif price <= 0:
        errors["price"] = "Price must be greater than 0"

    if not amount_is_number:
        errors["amount"] = "Amount must be a number"
    elif amount <= 0:
        errors["amount"] = "Amount must be greater than 0"
    elif price_is_number and price > 0 and amount * price < market.min_order_size:
        errors["amount"] = (
            f"Order value too small (min: "
            f"{_fmt(market.min_order_size, market.price_decimals)} {market.quote_token})"
        )

    if request.is_margin:
        if leverage.is_nan():
            errors["leverage"] = "Leverage must be a number"
        elif leverage < 1:
            errors["leverage"] = "Leverage must be at least 1x"
        if price_is_number and "leverage" not in errors:
            _check_liquidation_proximity(
                request, result, settings.liquidation_warning_margin, validation.warnings
            )

    if errors:
        logger.debug("order_rejected", side=request.side.value, **errors)

    return validation
