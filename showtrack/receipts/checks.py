"""Review warnings for processed line items."""

from __future__ import annotations

from .models import LineItem

LOW_CONFIDENCE = 0.7


def build_warnings(items: list[LineItem], *, check_feed_weights: bool = True) -> list[str]:
    """Human-readable warnings, in a fixed order.

    Nothing is reported for a check with zero matches, so an empty item
    list yields no warnings.
    """
    warnings: list[str] = []

    low_confidence = sum(1 for item in items if item.confidence < LOW_CONFIDENCE)
    if low_confidence:
        warnings.append(
            f"{low_confidence} items have low confidence and may need manual review"
        )

    uncategorized = sum(1 for item in items if item.category == "other")
    if uncategorized:
        warnings.append(f"{uncategorized} items could not be automatically categorized")

    missing_weight = sum(
        1 for item in items if item.category == "feed" and not item.feed_weight
    )
    if check_feed_weights and missing_weight:
        warnings.append(f"{missing_weight} feed items are missing weight information")

    return warnings
