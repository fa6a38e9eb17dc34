"""Provider-backed extraction steps and payload conversion."""

from __future__ import annotations

import datetime
import logging
import math
import re
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from .errors import NoItemsFound, ResponseParseFailed
from .models import UNKNOWN_VENDOR, ZERO, LineItem, ReceiptStatus, StructuredReceipt
from .prompts import line_items_prompt, structure_prompt
from .sanitizer import parse_json_payload

if TYPE_CHECKING:
    from .providers import ReceiptProvider

logger = logging.getLogger(__name__)

PROVIDER_RECEIPT_CONFIDENCE = 0.9
PROVIDER_ITEM_CONFIDENCE = 0.9

_US_DATE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")


def _field(payload: dict, *names: str) -> Any:
    for name in names:
        if payload.get(name) is not None:
            return payload[name]
    return None


def to_money(value: Any) -> Decimal | None:
    """Decimal from a JSON number or a ``"$1,234.50"`` string.

    NaN and infinities read as missing.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.replace("$", "").replace(",", "").strip())
        except InvalidOperation:
            return None
    else:
        return None
    return amount if amount.is_finite() else None


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def to_date(value: Any) -> datetime.date | None:
    """Parse ISO (``2024-09-08``) or US (``09/08/2024``) dates."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        pass
    m = _US_DATE.match(text)
    if m:
        try:
            return datetime.date(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        except ValueError:
            return None
    return None


def receipt_from_payload(payload: dict) -> StructuredReceipt:
    """Build a StructuredReceipt from a provider's structure object.

    Missing or unreadable fields take the same defaults as the heuristic
    parser.

    Raises:
        ResponseParseFailed: If the total is negative.
    """
    vendor = _field(payload, "vendor")
    total = to_money(_field(payload, "totalAmount", "total_amount", "total"))
    if total is not None and total < 0:
        raise ResponseParseFailed(f"negative total in provider response: {total}")
    receipt_number = _field(payload, "receiptNumber", "receipt_number")

    return StructuredReceipt(
        vendor=vendor.strip() if isinstance(vendor, str) and vendor.strip() else UNKNOWN_VENDOR,
        total_amount=total if total is not None else ZERO,
        date=to_date(_field(payload, "date")) or datetime.date.today(),
        receipt_number=str(receipt_number) if receipt_number not in (None, "") else None,
        tax_amount=to_money(_field(payload, "taxAmount", "tax_amount", "tax")),
        confidence=PROVIDER_RECEIPT_CONFIDENCE,
        status=ReceiptStatus.COMPLETED,
    )


def items_from_payload(payload: list) -> list[LineItem]:
    """Convert a provider's line-item array, skipping malformed entries."""
    items: list[LineItem] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        description = entry.get("description")
        amount = to_money(_field(entry, "amount", "totalPrice", "total_price"))
        if not isinstance(description, str) or not description.strip():
            continue
        if amount is None or amount < 0:
            continue

        feed_weight = _to_float(_field(entry, "feedWeight", "feed_weight"))
        unit = _field(entry, "unitOfMeasure", "unit_of_measure")
        items.append(
            LineItem(
                description=description.strip(),
                amount=amount,
                quantity=_to_float(entry.get("quantity")),
                unit_price=to_money(_field(entry, "unitPrice", "unit_price")),
                unit_of_measure=unit if isinstance(unit, str) and unit else None,
                feed_weight=feed_weight if feed_weight and feed_weight > 0 else None,
                raw_text=description,
                confidence=PROVIDER_ITEM_CONFIDENCE,
            )
        )
    if len(items) < len(payload):
        logger.debug("Skipped %d malformed line items", len(payload) - len(items))
    return items


async def provider_structure(provider: ReceiptProvider, text: str) -> StructuredReceipt:
    raw = await provider.complete(structure_prompt(text))
    payload = parse_json_payload(raw, dict)
    try:
        return receipt_from_payload(payload)
    except (ValueError, ArithmeticError) as e:
        raise ResponseParseFailed(f"{provider.name} structure is unusable: {e}") from e


async def provider_line_items(provider: ReceiptProvider, text: str) -> list[LineItem]:
    """Line items read by *provider*.

    Raises:
        NoItemsFound: If the response holds no usable item.
        ResponseParseFailed: If the response cannot be turned into items.
    """
    raw = await provider.complete(line_items_prompt(text))
    payload = parse_json_payload(raw, list)
    try:
        items = items_from_payload(payload)
    except (ValueError, ArithmeticError) as e:
        raise ResponseParseFailed(f"{provider.name} line items are unusable: {e}") from e
    if not items:
        raise NoItemsFound(f"{provider.name} returned no line items")
    return items
