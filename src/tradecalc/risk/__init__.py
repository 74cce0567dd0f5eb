"""Order validation and margin account checks."""

from tradecalc.risk.margin import (
    MarginAccountSummary,
    MarginPosition,
    check_add_collateral,
    check_repay,
    max_repay_amount,
    summarize_account,
)
from tradecalc.risk.validation import AccountBalances, OrderValidation, validate_order

__all__ = [
    "AccountBalances",
    "MarginAccountSummary",
    "MarginPosition",
    "OrderValidation",
    "check_add_collateral",
    "check_repay",
    "max_repay_amount",
    "summarize_account",
    "validate_order",
]
