"""Negotiation leverage summary over scored products."""
import math
from collections.abc import Mapping
from typing import Any, Iterable

from models.scoring import SavingsSummary

# Products at or above this vulnerability score give negotiation leverage
DEFAULT_VULNERABILITY_THRESHOLD = 6
DEFAULT_DISCOUNT_PERCENT = 15


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _field(obj: Any, name: str) -> Any:
    # Results may be ScoreResult objects or their to_dict() form
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def calculate_savings(
    results: Iterable[Any],
    discount_percent: float = DEFAULT_DISCOUNT_PERCENT,
    threshold: int = DEFAULT_VULNERABILITY_THRESHOLD,
) -> SavingsSummary:
    """
    Sum the estimated annual cost of vulnerable products.

    Only successful results count, and only when the vulnerability score
    reaches the threshold and a cost estimate exists. Malformed results
    are skipped rather than raising.

    Args:
        results: ScoreResult objects or plain dicts of the same shape
        discount_percent: Discount assumed achievable on negotiable spend
        threshold: Minimum vulnerability score for a product to count

    Returns:
        SavingsSummary for the result set
    """
    total = 0
    count = 0

    for result in results:
        if not _field(result, "success"):
            continue
        score = _field(result, "score")
        if score is None:
            continue

        vulnerability = _field(score, "vulnerability_score")
        cost = _field(score, "estimated_annual_cost")
        if not _is_number(vulnerability) or vulnerability < threshold:
            continue
        if not _is_number(cost):
            continue

        total += cost
        count += 1

    return SavingsSummary(
        total_estimated_cost=total,
        negotiable_product_count=count,
        potential_savings=_round_half_up(total * discount_percent / 100),
        discount_percent=discount_percent,
    )
