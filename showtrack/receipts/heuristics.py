"""Regex heuristics for reading receipt text without a model service.

Both entry points are pure functions of the input text: they never raise
and always return a best-effort result.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from .models import (
    UNKNOWN_VENDOR,
    ZERO,
    LineItem,
    ReceiptStatus,
    StructuredReceipt,
)

HEURISTIC_ITEM_CONFIDENCE = 0.7
HEURISTIC_RECEIPT_CONFIDENCE = 0.75

_MONEY = r"(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}"
_CENT = Decimal("0.01")


def _to_money(raw: str) -> Decimal:
    return Decimal(raw.replace(",", ""))


# ---------------------------------------------------------------------------
# Receipt-level field rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRule:
    """One declarative extraction rule.

    ``scope`` selects the lines searched: ``head`` (first five lines),
    ``forward`` (top to bottom) or ``reverse`` (bottom to top).
    ``convert`` returns None to reject a match and keep searching.
    """

    field: str
    pattern: re.Pattern[str]
    priority: int
    scope: str = "forward"
    convert: Callable[[re.Match[str]], object | None] = lambda m: m.group(1)


def _whole_line(m: re.Match[str]) -> str:
    return m.string.strip()


def _money_group(m: re.Match[str]) -> Decimal:
    return _to_money(m.group("amount"))


def _reference(m: re.Match[str]) -> str:
    return " ".join(m.group(1).split())


def _make_date(year: int, month: int, day: int) -> datetime.date | None:
    if year < 100:
        year += 2000 if year < 70 else 1900
    try:
        return datetime.date(year, month, day)
    except ValueError:
        return None


def _iso_date(m: re.Match[str]) -> datetime.date | None:
    return _make_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _us_date(m: re.Match[str]) -> datetime.date | None:
    return _make_date(int(m.group(3)), int(m.group(1)), int(m.group(2)))


def _rule(field: str, pattern: str, priority: int, scope: str = "forward", convert=None) -> FieldRule:
    compiled = re.compile(pattern, re.IGNORECASE)
    if convert is None:
        return FieldRule(field, compiled, priority, scope)
    return FieldRule(field, compiled, priority, scope, convert)


_REF = r"\s*(?:#|no\.?|number|id)?\s*[:#]?\s*([A-Z0-9-]*\d[A-Z0-9-]*)"

FIELD_RULES: tuple[FieldRule, ...] = tuple(sorted(
    (
        # Known agricultural vendors near the top of the receipt
        _rule("vendor", r"tractor supply", 10, "head", _whole_line),
        _rule("vendor", r"feed store", 11, "head", _whole_line),
        _rule("vendor", r"farm.*supply", 12, "head", _whole_line),
        _rule("vendor", r"rural king", 13, "head", _whole_line),
        _rule("vendor", r"southern states", 14, "head", _whole_line),
        _rule("vendor", r"\bco-?op\b", 15, "head", _whole_line),
        _rule("vendor", r"ranch (?:&|and) home", 16, "head", _whole_line),
        # Fallback: first non-empty line
        _rule("vendor", r"\S", 99, "head", _whole_line),
        # The authoritative total sits near the bottom
        _rule("total", rf"(?<!sub )(?<!sub-)\btotal\b.*?\$?(?P<amount>{_MONEY})\s*[A-Z]?$", 20, "reverse", _money_group),
        _rule("total", rf"\bamount\b.*?\$?(?P<amount>{_MONEY})\s*$", 21, "reverse", _money_group),
        _rule("total", rf"\$(?P<amount>{_MONEY})\s*total\b", 22, "reverse", _money_group),
        _rule("tax", rf"\btax\b.*?\$?(?P<amount>{_MONEY})\s*[A-Z]?$", 30, "reverse", _money_group),
        _rule("date", r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b", 40, convert=_iso_date),
        _rule("date", r"\b(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})\b", 41, convert=_us_date),
        _rule("date", r"\b(\d{1,2})-(\d{1,2})-(\d{4}|\d{2})\b", 42, convert=_us_date),
        _rule("receipt_number", r"\binvoice" + _REF, 50, convert=_reference),
        _rule("receipt_number", r"\breceipt" + _REF, 51, convert=_reference),
        _rule("receipt_number", r"\bTC#\s*(\d[\d ]*\d)", 52, convert=_reference),
        _rule("receipt_number", r"\btrans(?:action)?" + _REF, 53, convert=_reference),
        _rule("receipt_number", r"\border" + _REF, 54, convert=_reference),
    ),
    key=lambda r: r.priority,
))


def _lines(text: str) -> list[str]:
    """Non-empty lines with runs of whitespace collapsed."""
    if not text:
        return []
    return [" ".join(line.split()) for line in text.splitlines() if line.strip()]


def _scan(rule: FieldRule, lines: list[str]) -> object | None:
    if rule.scope == "head":
        candidates = lines[:5]
    elif rule.scope == "reverse":
        candidates = list(reversed(lines))
    else:
        candidates = lines

    for line in candidates:
        m = rule.pattern.search(line)
        if m is None:
            continue
        value = rule.convert(m)
        if value is not None:
            return value
    return None


def parse_structure(text: str, today: datetime.date | None = None) -> StructuredReceipt:
    """Extract vendor, total, date, receipt number and tax from raw text.

    Args:
        text: Receipt text, one printed line per text line.
        today: Date used when no date is printed. Defaults to today.

    Returns:
        A completed StructuredReceipt. Missing fields fall back to
        ``Unknown Vendor``, a zero total and *today*.
    """
    lines = _lines(text)
    values: dict[str, object] = {}
    for rule in FIELD_RULES:
        if rule.field in values:
            continue
        value = _scan(rule, lines)
        if value is not None:
            values[rule.field] = value

    return StructuredReceipt(
        vendor=values.get("vendor", UNKNOWN_VENDOR),
        total_amount=values.get("total", ZERO),
        date=values.get("date") or today or datetime.date.today(),
        receipt_number=values.get("receipt_number"),
        tax_amount=values.get("tax"),
        confidence=HEURISTIC_RECEIPT_CONFIDENCE if lines else 0.0,
        status=ReceiptStatus.COMPLETED,
    )


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------

_SKIP_LINE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"thank\s*you", r"\breceipt\b", r"total", r"\btax\b", r"\bcash\b",
        r"\bchange\b", r"\bcard\b", r"\bapproved\b", r"\bapproval\b",
        r"signature", r"tendered", r"\bpayment\b", r"\bbalance\b",
        r"return policy", r"buyer agrees", r"\bdebit\b", r"\bcredit\b",
    )
)

# description [unit price] amount [tax flag]
_ITEM_LINE = re.compile(
    rf"^(?P<description>.+?)\s+(?:\$?(?P<unit_price>{_MONEY})\s+)?"
    rf"\$?(?P<amount>{_MONEY})(?:\s+[A-Z]{{1,2}})?$"
)
# "$28.50 $57.00" under a description printed on its own line
_PRICE_ONLY_LINE = re.compile(
    rf"^(?:\$?(?P<unit_price>{_MONEY})\s+)?\$?(?P<amount>{_MONEY})(?:\s+[A-Z]{{1,2}})?$"
)

# Unit-of-measure codes and tax flags printed in item columns
_UOM_CODES = frozenset({"EA", "BG", "BAG", "LB", "CS", "BX", "PK", "PR", "GAL", "QT", "TN"})
_FLAG_CODES = frozenset({"H", "T", "N", "F", "X"})

_QUANTITY_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(\d+)\s*x\b", re.IGNORECASE),
    re.compile(r"\bqty[:\s]*(\d+)", re.IGNORECASE),
    re.compile(r"\b(\d+)\s*qty\b", re.IGNORECASE),
    # Leading count, unless it is a weight ("50 LB LAYER PELLETS")
    re.compile(
        r"^(\d{1,3})\s+(?!(?:lbs?|pounds?|kgs?|tons?|oz)\b)(?=[A-Za-z])",
        re.IGNORECASE,
    ),
)

_POUNDS_PER_KG = 2.20462
_POUNDS_PER_TON = 2000.0

_WEIGHT_RULES: tuple[tuple[re.Pattern[str], float], ...] = (
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:lbs?|pounds?)\b", re.IGNORECASE), 1.0),
    (re.compile(r"(\d+(?:\.\d+)?)\s*#"), 1.0),
    (re.compile(r"(\d+(?:\.\d+)?)\s*kgs?\b", re.IGNORECASE), _POUNDS_PER_KG),
    (re.compile(r"(\d+(?:\.\d+)?)\s*tons?\b", re.IGNORECASE), _POUNDS_PER_TON),
    (re.compile(r"\b(?:bag|sack)\s*(\d+(?:\.\d+)?)\b", re.IGNORECASE), 1.0),
)


def is_header_or_footer(line: str) -> bool:
    return any(p.search(line) for p in _SKIP_LINE_PATTERNS)


def extract_quantity(description: str) -> float | None:
    """Purchased count from ``2 x``, ``qty 2`` or a leading count."""
    for pattern in _QUANTITY_RULES:
        m = pattern.search(description)
        if m:
            qty = int(m.group(1))
            return float(qty) if qty > 0 else None
    return None


def extract_feed_weight(description: str, quantity: float | None = None) -> float | None:
    """Weight in pounds named in *description*, times the purchased count.

    Returns None when no weight is printed.
    """
    for pattern, to_pounds in _WEIGHT_RULES:
        m = pattern.search(description)
        if m:
            weight = float(m.group(1)) * to_pounds
            if quantity and quantity > 1:
                weight *= quantity
            return round(weight, 2)
    return None


def _has_letters(text: str) -> bool:
    return any(ch.isalpha() for ch in text)


def _split_codes(description: str) -> tuple[str, str | None]:
    """Strip leading column codes (``H EA``) and return (text, unit)."""
    tokens = description.split()
    unit = None
    while tokens and tokens[0].upper() in _UOM_CODES | _FLAG_CODES:
        code = tokens.pop(0).upper()
        if code in _UOM_CODES and unit is None:
            unit = code
    return " ".join(tokens), unit


def _build_item(
    description: str,
    amount: str,
    unit_price: str | None,
    raw_text: str,
    unit: str | None = None,
) -> LineItem | None:
    description, code_unit = _split_codes(description)
    description = description.rstrip(" :-")
    if not _has_letters(description):
        return None

    value = _to_money(amount)
    quantity = extract_quantity(description)
    if unit_price is not None:
        price = _to_money(unit_price)
    elif quantity:
        price = (value / Decimal(str(quantity))).quantize(_CENT)
    else:
        price = None

    feed_weight = extract_feed_weight(description, quantity)
    return LineItem(
        description=description,
        amount=value,
        quantity=quantity,
        unit_price=price,
        unit_of_measure=unit or code_unit or ("LB" if feed_weight else None),
        feed_weight=feed_weight,
        raw_text=raw_text,
        confidence=HEURISTIC_ITEM_CONFIDENCE,
    )


def _only_codes(text: str) -> bool:
    tokens = text.split()
    return bool(tokens) and all(t.upper() in _UOM_CODES | _FLAG_CODES for t in tokens)


def parse_line_items(text: str) -> list[LineItem]:
    """Extract priced line items from raw receipt text.

    Handles single-line items (``FEED 50LB $12.99``) and two-line layouts
    where the prices are printed on the line below the description.
    Items are returned uncategorized (category ``other``).
    """
    items: list[LineItem] = []
    pending: str | None = None

    for line in _lines(text):
        if is_header_or_footer(line):
            pending = None
            continue

        m = _ITEM_LINE.match(line)
        if m and _has_letters(m.group("description")):
            desc = m.group("description")
            if _only_codes(desc):
                if pending is not None:
                    _, unit = _split_codes(desc)
                    item = _build_item(
                        pending, m.group("amount"), m.group("unit_price"),
                        f"{pending}\n{line}", unit,
                    )
                    if item is not None:
                        items.append(item)
            else:
                item = _build_item(desc, m.group("amount"), m.group("unit_price"), line)
                if item is not None:
                    items.append(item)
            pending = None
            continue

        m = _PRICE_ONLY_LINE.match(line)
        if m:
            if pending is not None:
                item = _build_item(
                    pending, m.group("amount"), m.group("unit_price"),
                    f"{pending}\n{line}",
                )
                if item is not None:
                    items.append(item)
            pending = None
            continue

        pending = line if _has_letters(line) else None

    return items
