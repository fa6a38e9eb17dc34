"""Group categorized line items into draft expense records."""

from __future__ import annotations

import datetime
from collections import Counter

from .categories import get_category
from .models import ZERO, ExpenseSuggestion, LineItem


def group_by_category(items: list[LineItem]) -> dict[str, list[LineItem]]:
    """Stable grouping: categories in first-seen order, items in input order."""
    groups: dict[str, list[LineItem]] = {}
    for item in items:
        groups.setdefault(item.category, []).append(item)
    return groups


def most_common_subcategory(items: list[LineItem]) -> str | None:
    """Most frequent subcategory; ties go to the one seen first."""
    counts = Counter(item.subcategory for item in items if item.subcategory)
    if not counts:
        return None
    # Counter preserves insertion order, and max() keeps the first maximum
    return max(counts, key=counts.__getitem__)


def _description(category_id: str, items: list[LineItem], vendor: str) -> str:
    if len(items) == 1:
        return items[0].description
    label = get_category(category_id).label
    return f"{label} from {vendor} ({len(items)} items)"


def build_suggestions(
    items: list[LineItem],
    vendor: str,
    date: datetime.date,
    *,
    receipt_number: str | None = None,
) -> list[ExpenseSuggestion]:
    """One suggestion per category present in *items*.

    Args:
        items: Categorized line items.
        vendor: Receipt vendor, copied onto every suggestion.
        date: Receipt date.
        receipt_number: Printed receipt number, referenced in the notes.

    Returns:
        Suggestions in first-seen category order. Every item lands in
        exactly one suggestion and each amount is the exact item sum.
    """
    suggestions = []
    for category_id, group in group_by_category(items).items():
        info = get_category(category_id)
        suggestions.append(
            ExpenseSuggestion(
                category=category_id,
                amount=sum((item.amount for item in group), ZERO),
                description=_description(category_id, group, vendor),
                vendor=vendor,
                date=date,
                is_deductible=info.is_deductible,
                tax_line=info.tax_line,
                line_items=tuple(group),
                subcategory=most_common_subcategory(group) or info.subcategories[0],
                notes=f"Auto-generated from receipt {receipt_number or 'N/A'}",
            )
        )
    return suggestions
