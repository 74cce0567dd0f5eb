"""Decimal rounding and fixed-point conversion helpers.

All monetary values use Decimal. Never use float for prices, quantities, or fees.
Every rounding call names its direction explicitly:
  - ROUND_DOWN truncates toward zero (amounts the user receives)
  - ROUND_UP rounds away from zero (amounts the user owes)
"""

from decimal import ROUND_DOWN, ROUND_UP, Context, Decimal, localcontext

# Wide enough for 18-decimal token balances times exchange-scale prices.
# Template only: always entered through localcontext(), which copies it.
CALC_CONTEXT = Context(prec=78)

HOT_TOKEN_DECIMALS = 18


def _quantum(decimals: int) -> Decimal:
    return Decimal(1).scaleb(-decimals)


def round_down(value: Decimal, decimals: int) -> Decimal:
    """Round a value toward zero to ``decimals`` fractional digits.

    Args:
        value: The raw value to round.
        decimals: Number of fractional digits to keep.

    Returns:
        The truncated value.
    """
    with localcontext(CALC_CONTEXT):
        return value.quantize(_quantum(decimals), rounding=ROUND_DOWN)


def round_up(value: Decimal, decimals: int) -> Decimal:
    """Round a value away from zero to ``decimals`` fractional digits.

    Used wherever under-computing would understate what the user owes
    (collateral requirements, totals payable).

    Args:
        value: The raw value to round.
        decimals: Number of fractional digits to keep.

    Returns:
        The rounded value.
    """
    with localcontext(CALC_CONTEXT):
        return value.quantize(_quantum(decimals), rounding=ROUND_UP)


def to_unit_amount(raw: Decimal | int, decimals: int) -> Decimal:
    """Convert a smallest-unit token amount to display units.

    Example: ``to_unit_amount(1500000000000000000, 18) == Decimal("1.5")``.
    """
    with localcontext(CALC_CONTEXT):
        return Decimal(raw).scaleb(-decimals)


def available_balance(
    balance: Decimal | int,
    locked_balance: Decimal | int,
    decimals: int,
) -> Decimal:
    """Spendable balance in display units: ``max(0, balance - locked)``."""
    with localcontext(CALC_CONTEXT):
        free = max(Decimal(balance) - Decimal(locked_balance), Decimal("0"))
    return to_unit_amount(free, decimals)
