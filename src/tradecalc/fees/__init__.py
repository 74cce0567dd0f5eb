"""Fee discount tiers for discount-token holders."""

from tradecalc.fees.discount import (
    BoundedTier,
    DiscountTier,
    UnboundedTier,
    lookup_discount,
    parse_discount_rules,
)

__all__ = [
    "BoundedTier",
    "DiscountTier",
    "UnboundedTier",
    "lookup_discount",
    "parse_discount_rules",
]
