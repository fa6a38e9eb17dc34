"""Feed purchase summary for a processed receipt."""

from __future__ import annotations

from decimal import Decimal

from .heuristics import extract_feed_weight
from .models import ZERO, FeedProjection, FeedSummary, FeedTypeSummary, LineItem

SUPPLY_DAYS = 30
_CENT = Decimal("0.01")


def analyze_feed(items: list[LineItem], *, extract_weights: bool = True) -> FeedSummary:
    """Sum weight and cost over the ``feed`` items.

    A 30-day projection is attached when any weight is known. It assumes
    the purchase lasts exactly 30 days and is not a consumption forecast.
    Receipts without feed items get an all-zero summary.
    """
    feed_types: list[FeedTypeSummary] = []
    for item in items:
        if item.category != "feed":
            continue
        weight = item.feed_weight
        if not weight and extract_weights:
            weight = extract_feed_weight(item.description, item.quantity)
        feed_types.append(
            FeedTypeSummary(
                name=item.description,
                weight=weight or 0.0,
                cost=item.amount,
                category=item.feed_type or item.subcategory or "other",
            )
        )

    if not feed_types:
        return FeedSummary()

    total_weight = sum(f.weight for f in feed_types)
    total_cost = sum((f.cost for f in feed_types), ZERO)
    projection = None
    if total_weight > 0:
        projection = FeedProjection(
            estimated_daily_consumption=round(total_weight / SUPPLY_DAYS, 2),
            days_of_feed_supply=SUPPLY_DAYS,
            cost_per_day=(total_cost / SUPPLY_DAYS).quantize(_CENT),
        )

    return FeedSummary(
        total_feed_weight=total_weight,
        estimated_feed_cost=total_cost,
        feed_types=tuple(feed_types),
        projection=projection,
    )
