"""Assign registry categories to extracted line items."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from .categories import (
    match_category,
    match_feed_type,
    match_subcategory,
    normalize_category_id,
)
from .errors import ProviderUnavailable, ResponseParseFailed, StepFailed
from .heuristics import extract_feed_weight
from .models import LineItem
from .prompts import categorize_prompt
from .sanitizer import parse_json_payload

if TYPE_CHECKING:
    from .providers import ReceiptProvider

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.7


def heuristic_confidence(category: str, feed_weight: float | None, description: str) -> float:
    """0.7, +0.2 for a weighed feed item, +0.1 for a descriptive name."""
    score = BASE_CONFIDENCE
    if category == "feed" and feed_weight:
        score += 0.2
    if len(description) > 10:
        score += 0.1
    return round(min(score, 1.0), 2)


def _feed_fields(item: LineItem, text: str) -> tuple[float | None, str | None]:
    weight = item.feed_weight or extract_feed_weight(item.description, item.quantity)
    return weight, match_feed_type(text)


def categorize_item(item: LineItem) -> LineItem:
    """Keyword-match one item against the category registry."""
    text = f"{item.description} {item.raw_text or ''}"
    category = match_category(text)
    if category == "feed":
        feed_weight, feed_type = _feed_fields(item, text)
    else:
        feed_weight, feed_type = None, None

    return replace(
        item,
        category=category,
        subcategory=match_subcategory(item.description, category),
        feed_weight=feed_weight,
        feed_type=feed_type,
        confidence=heuristic_confidence(category, feed_weight, item.description),
    )


def categorize(items: list[LineItem]) -> list[LineItem]:
    """Categorize every item heuristically, preserving order and count."""
    return [categorize_item(item) for item in items]


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def apply_provider_categories(items: list[LineItem], payload: list[Any]) -> list[LineItem]:
    """Merge a provider's categorization array onto *items* by position.

    Entries that are missing, malformed or name an unknown category fall
    back to the heuristic result for that item.
    """
    merged: list[LineItem] = []
    for index, item in enumerate(items):
        entry = payload[index] if index < len(payload) else None
        category = normalize_category_id(entry.get("category")) if isinstance(entry, dict) else None
        if category is None:
            logger.debug("Provider category for item %d rejected: %r", index, entry)
            merged.append(categorize_item(item))
            continue

        text = f"{item.description} {item.raw_text or ''}"
        if category == "feed":
            provided = _number(entry.get("feedWeight"))
            if provided and provided > 0:
                feed_weight, feed_type = provided, match_feed_type(text)
            else:
                feed_weight, feed_type = _feed_fields(item, text)
        else:
            feed_weight, feed_type = None, None

        subcategory = entry.get("subcategory")
        if not isinstance(subcategory, str) or not subcategory.strip():
            subcategory = match_subcategory(item.description, category)

        confidence = _number(entry.get("confidence"))
        if confidence is None:
            confidence = heuristic_confidence(category, feed_weight, item.description)

        merged.append(
            replace(
                item,
                category=category,
                subcategory=subcategory.strip(),
                feed_weight=feed_weight,
                feed_type=feed_type,
                confidence=min(max(confidence, 0.0), 1.0),
            )
        )
    return merged


class Categorizer:
    """Categorize through a provider, falling back to keyword matching."""

    def __init__(self, provider: ReceiptProvider | None = None) -> None:
        self._provider = provider

    async def with_provider(self, items: list[LineItem]) -> list[LineItem]:
        """Categorize using the provider only.

        Raises:
            StepFailed: If the provider is missing, unconfigured or its
                response cannot be parsed.
        """
        if self._provider is None:
            raise ProviderUnavailable("no categorization provider")
        raw = await self._provider.complete(
            categorize_prompt([item.description for item in items])
        )
        payload = parse_json_payload(raw, list)
        try:
            return apply_provider_categories(items, payload)
        except (ValueError, ArithmeticError) as e:
            raise ResponseParseFailed(
                f"{self._provider.name} categories are unusable: {e}"
            ) from e

    async def categorize(self, items: list[LineItem]) -> tuple[list[LineItem], str]:
        """Return (items, source) where source names who categorized them."""
        if not items:
            return [], "heuristic"
        try:
            return await self.with_provider(items), self._provider.name
        except StepFailed as e:
            logger.info("Categorization falling back to keywords: %s", e)
            return categorize(items), "heuristic"
