"""Margin account arithmetic: account summary and collateral/repay checks.

All values are quote-denominated Decimals already converted at oracle
prices by the caller. Price feeds and on-chain balances are out of scope.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from tradecalc.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class MarginPosition:
    """Collateral and debt of one margin position, valued in quote."""

    market_id: str
    collateral_value: Decimal
    borrowed_value: Decimal
    maintenance_margin_ratio: Decimal  # Fraction of debt that must stay covered


@dataclass(frozen=True)
class MarginAccountSummary:
    """Aggregate margin account state across positions."""

    total_collateral_value: Decimal
    total_borrowed_value: Decimal
    account_leverage: Decimal
    maintenance_margin_required: Decimal
    available_for_new_position: Decimal
    health_ratio: Decimal | None  # None when nothing is borrowed


def summarize_account(positions: Iterable[MarginPosition]) -> MarginAccountSummary:
    """Aggregate positions into an account summary.

    Leverage is (collateral + borrowed) / collateral. Free collateral is
    collateral minus maintenance requirement, floored at zero. Health ratio
    is collateral / maintenance requirement; below 1 the account is
    eligible for liquidation.

    Args:
        positions: Open margin positions.

    Returns:
        MarginAccountSummary. All-zero values for an empty account.
    """
    collateral = ZERO
    borrowed = ZERO
    maintenance = ZERO

    for position in positions:
        collateral += position.collateral_value
        borrowed += position.borrowed_value
        maintenance += position.borrowed_value * position.maintenance_margin_ratio

    if collateral > ZERO:
        leverage = (collateral + borrowed) / collateral
    else:
        leverage = ZERO

    health_ratio = collateral / maintenance if maintenance > ZERO else None

    if health_ratio is not None and health_ratio < Decimal("1"):
        logger.warning(
            "margin_health_below_one",
            health_ratio=health_ratio,
            collateral=collateral,
            maintenance=maintenance,
        )

    return MarginAccountSummary(
        total_collateral_value=collateral,
        total_borrowed_value=borrowed,
        account_leverage=leverage,
        maintenance_margin_required=maintenance,
        available_for_new_position=max(collateral - maintenance, ZERO),
        health_ratio=health_ratio,
    )


def check_add_collateral(amount: Decimal, available: Decimal) -> tuple[bool, str]:
    """Check a collateral deposit against the spendable balance.

    Returns:
        Tuple of (allowed, reason). If allowed is True, reason is "".
    """
    if amount <= ZERO:
        return False, "Amount must be greater than 0"
    if amount > available:
        return False, "Insufficient balance to add this collateral."
    return True, ""


def check_repay(amount: Decimal, available: Decimal, debt: Decimal) -> tuple[bool, str]:
    """Check a loan repayment against the spendable balance and the debt.

    Returns:
        Tuple of (allowed, reason). If allowed is True, reason is "".
    """
    if amount <= ZERO:
        return False, "Amount must be greater than 0"
    if amount > available:
        return False, "Insufficient balance to repay this amount."
    if amount > debt:
        return False, "Repayment amount exceeds total debt."
    return True, ""


def max_repay_amount(available: Decimal, debt: Decimal) -> Decimal:
    """Largest repayment possible: the smaller of balance and debt."""
    return min(available, debt)
