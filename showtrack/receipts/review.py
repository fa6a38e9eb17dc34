"""Manual corrections applied to a processed receipt.

Every function returns a new ProcessingResult with suggestions, feed
analysis and warnings rebuilt; the input result is left untouched.
Edited items are marked with full confidence.
"""

from __future__ import annotations

from dataclasses import replace

from .categories import CATEGORIES, match_feed_type, match_subcategory
from .checks import build_warnings
from .feed import analyze_feed
from .heuristics import extract_feed_weight
from .models import LineItem, ProcessingResult
from .suggestions import build_suggestions

MANUAL_CONFIDENCE = 1.0


def _check_category(category: str) -> None:
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category!r}")


def _check_index(result: ProcessingResult, index: int) -> None:
    if not 0 <= index < len(result.line_items):
        raise IndexError(f"line item {index} out of range (0..{len(result.line_items) - 1})")


def _assign(item: LineItem, category: str, subcategory: str | None) -> LineItem:
    if category == "feed":
        weight = item.feed_weight or extract_feed_weight(item.description, item.quantity)
        feed_type = item.feed_type or match_feed_type(item.description)
    else:
        weight, feed_type = None, None
    return replace(
        item,
        category=category,
        subcategory=subcategory or match_subcategory(item.description, category),
        feed_weight=weight,
        feed_type=feed_type,
        confidence=MANUAL_CONFIDENCE,
    )


def _rebuild(result: ProcessingResult, items: list[LineItem]) -> ProcessingResult:
    receipt = result.receipt_data
    confidences = [item.confidence for item in items]
    metrics = replace(
        result.metrics,
        categorization_confidence=sum(confidences) / len(confidences) if confidences else 0.0,
        items_requiring_review=sum(
            1 for c in confidences if c < result.metrics.review_threshold
        ),
    )
    return replace(
        result,
        line_items=tuple(items),
        suggested_expenses=tuple(
            build_suggestions(
                items, receipt.vendor, receipt.date, receipt_number=receipt.receipt_number
            )
        ),
        feed_analysis=analyze_feed(items),
        metrics=metrics,
        warnings=tuple(build_warnings(items)),
    )


def recategorize_item(
    result: ProcessingResult,
    index: int,
    category: str,
    subcategory: str | None = None,
) -> ProcessingResult:
    """Move one line item to *category*.

    Raises:
        ValueError: If *category* is not a registry id.
        IndexError: If *index* does not name a line item.
    """
    _check_category(category)
    _check_index(result, index)
    items = list(result.line_items)
    items[index] = _assign(items[index], category, subcategory)
    return _rebuild(result, items)


def set_feed_weight(result: ProcessingResult, index: int, weight: float) -> ProcessingResult:
    """Record a feed weight in pounds for a ``feed`` line item."""
    _check_index(result, index)
    if weight < 0:
        raise ValueError(f"weight must be >= 0, got {weight}")
    item = result.line_items[index]
    if item.category != "feed":
        raise ValueError(f"line item {index} is {item.category!r}, not feed")
    items = list(result.line_items)
    items[index] = replace(item, feed_weight=float(weight), confidence=MANUAL_CONFIDENCE)
    return _rebuild(result, items)


def bulk_recategorize(
    result: ProcessingResult, from_category: str, to_category: str
) -> ProcessingResult:
    """Move every item in *from_category* to *to_category*."""
    _check_category(to_category)
    items = [
        _assign(item, to_category, None) if item.category == from_category else item
        for item in result.line_items
    ]
    return _rebuild(result, items)
