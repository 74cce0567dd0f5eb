"""Fee discount tiers for holders of the exchange's discount token.

A discount table is an ascending sequence of bounded tiers closed by a
single unbounded catch-all tier. Raw rule tables use the exchange's
``[[threshold, rate], ..., [-1, rate]]`` form; ``parse_discount_rules``
converts them once at the boundary so the lookup never sees the ``-1``
sentinel.

The ``rate`` of a tier is the multiplier the trader pays, not the discount
itself: 0.7 means a 30% reduction.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from tradecalc.exceptions import DiscountRulesError
from tradecalc.precision import HOT_TOKEN_DECIMALS, to_unit_amount

NO_DISCOUNT = Decimal("1")
UNBOUNDED_SENTINEL = Decimal("-1")


@dataclass(frozen=True)
class BoundedTier:
    """Applies when the normalized token balance is <= threshold."""

    threshold: Decimal
    rate: Decimal


@dataclass(frozen=True)
class UnboundedTier:
    """Catch-all tier, applies to any balance that reaches it."""

    rate: Decimal


DiscountTier = BoundedTier | UnboundedTier


def parse_discount_rules(
    rules: Iterable[Sequence[Decimal | int | str]],
) -> tuple[DiscountTier, ...]:
    """Convert a raw ``[[threshold, rate], ...]`` table into typed tiers.

    Args:
        rules: Pairs of (balance threshold, fee multiplier). A threshold
            of -1 marks the catch-all tier.

    Returns:
        Tiers in evaluation order. An empty table yields an empty tuple.

    Raises:
        DiscountRulesError: If a rule is not a pair, a rate is negative,
            bounded thresholds are not strictly ascending, or the catch-all
            tier is missing, duplicated, or not last.
    """
    tiers: list[DiscountTier] = []
    previous: Decimal | None = None

    for index, rule in enumerate(rules):
        if len(rule) != 2:
            raise DiscountRulesError(f"Rule {index} must be a [threshold, rate] pair")
        if tiers and isinstance(tiers[-1], UnboundedTier):
            raise DiscountRulesError("Catch-all tier (-1) must be the last rule")

        threshold = Decimal(str(rule[0]))
        rate = Decimal(str(rule[1]))
        if rate < 0:
            raise DiscountRulesError(f"Rule {index} has negative rate {rate}")

        if threshold == UNBOUNDED_SENTINEL:
            tiers.append(UnboundedTier(rate=rate))
            continue

        if threshold < 0:
            raise DiscountRulesError(f"Rule {index} has negative threshold {threshold}")
        if previous is not None and threshold <= previous:
            raise DiscountRulesError(
                f"Thresholds must be ascending: {threshold} after {previous}"
            )
        previous = threshold
        tiers.append(BoundedTier(threshold=threshold, rate=rate))

    if tiers and not isinstance(tiers[-1], UnboundedTier):
        raise DiscountRulesError("Discount table must end with a catch-all tier (-1)")

    return tuple(tiers)


def lookup_discount(
    hot_token_amount: Decimal | None,
    tiers: Sequence[DiscountTier],
) -> Decimal:
    """Return the fee multiplier for a raw discount-token balance.

    The balance is normalized from 18-decimal fixed point, then tiers are
    scanned in order: the first bounded tier whose threshold is >= the
    normalized balance wins, and the catch-all tier wins whenever reached.

    Args:
        hot_token_amount: Raw token balance in smallest units, or None.
        tiers: Parsed discount tiers in evaluation order.

    Returns:
        Fee multiplier; Decimal("1") when the balance is absent or the table
        is empty. A zero balance is scanned like any other.
    """
    if hot_token_amount is None or not tiers:
        return NO_DISCOUNT

    normalized = to_unit_amount(hot_token_amount, HOT_TOKEN_DECIMALS)

    for tier in tiers:
        if isinstance(tier, UnboundedTier):
            return tier.rate
        if normalized <= tier.threshold:
            return tier.rate

    return NO_DISCOUNT
