"""Prompt templates shared by every model provider."""

from __future__ import annotations

from .categories import CATEGORIES

VISION_PROMPT = """\
Extract the business-relevant text from this receipt image for expense tracking.
Include:

1. Store/vendor name (business name only)
2. Business city and state (not the full address)
3. Date and time
4. Receipt/transaction number
5. ALL product line items with descriptions and prices
6. Subtotal, tax and total amounts
7. Payment method type

Do NOT include full street addresses, card numbers, customer personal
information or signatures.

Return only the receipt text, one printed line per line.
"""

_STRUCTURE_PROMPT = """\
Analyze this receipt text and extract key information.
Return ONLY a JSON object with no markdown and no explanations:

{{
  "vendor": "Store name",
  "totalAmount": 123.45,
  "taxAmount": 1.50,
  "date": "2024-01-15",
  "receiptNumber": "12345"
}}

Receipt text:
{text}
"""

_LINE_ITEMS_PROMPT = """\
Extract all individual line items from this receipt text.
Return ONLY a JSON array with no markdown and no explanations.

Each item:
{{
  "description": "Clear item description",
  "amount": 12.34,
  "quantity": 1,
  "unitPrice": 12.34,
  "unitOfMeasure": "EA",
  "feedWeight": 50
}}

Rules:
- Only include purchased items, not subtotals, taxes, payment info or store details
- Use the extended (line total) price for amount and the unit price for unitPrice
- For animal feed, feedWeight is the total weight in pounds for the line; otherwise 0
- Parse quantities correctly (e.g. "2 SHOW BRUSH" means quantity 2)

Receipt text:
{text}
"""

_CATEGORIZE_PROMPT = """\
Categorize these agricultural/livestock purchase items.
Return ONLY a JSON array with one entry per item, in the same order,
with no markdown and no explanations.

Categories:
{categories}

Each entry:
{{
  "description": "Original item description",
  "category": "feed",
  "subcategory": "Grain",
  "feedWeight": 50,
  "confidence": 0.95
}}

Items:
{items}
"""


def structure_prompt(text: str) -> str:
    return _STRUCTURE_PROMPT.format(text=text)


def line_items_prompt(text: str) -> str:
    return _LINE_ITEMS_PROMPT.format(text=text)


def categorize_prompt(descriptions: list[str]) -> str:
    categories = "\n".join(
        f"- {c.id}: {c.label} ({', '.join(c.subcategories)})"
        for c in CATEGORIES.values()
    )
    items = "\n".join(f"{i + 1}. {d}" for i, d in enumerate(descriptions))
    return _CATEGORIZE_PROMPT.format(categories=categories, items=items)
