"""Data models for receipt extraction results."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

ZERO = Decimal("0")
UNKNOWN_VENDOR = "Unknown Vendor"


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractedText:
    """Raw receipt text from a vision provider or a local source."""

    text: str
    confidence: float  # 0.0 to 1.0


@dataclass(frozen=True)
class StructuredReceipt:
    """Receipt-level fields: who, when, how much."""

    vendor: str = UNKNOWN_VENDOR
    total_amount: Decimal = ZERO
    date: datetime.date = field(default_factory=datetime.date.today)
    receipt_number: str | None = None
    tax_amount: Decimal | None = None
    confidence: float = 0.0
    status: ReceiptStatus = ReceiptStatus.PENDING

    def __post_init__(self) -> None:
        if self.total_amount < 0:
            raise ValueError(f"total_amount must be >= 0, got {self.total_amount}")


@dataclass(frozen=True)
class LineItem:
    """A single priced entry from a receipt."""

    description: str
    amount: Decimal
    category: str = "other"
    subcategory: str | None = None
    quantity: float | None = None
    unit_price: Decimal | None = None
    unit_of_measure: str | None = None
    feed_weight: float | None = None  # pounds, feed items only
    feed_type: str | None = None  # grain, pellets, textured, supplement, hay
    raw_text: str | None = None
    confidence: float = 0.7

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"amount must be >= 0, got {self.amount}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class FeedTypeSummary:
    name: str
    weight: float
    cost: Decimal
    category: str


@dataclass(frozen=True)
class FeedProjection:
    """Constant 30-day supply estimate. Not a consumption forecast."""

    estimated_daily_consumption: float
    days_of_feed_supply: int
    cost_per_day: Decimal


@dataclass(frozen=True)
class FeedSummary:
    total_feed_weight: float = 0.0
    estimated_feed_cost: Decimal = ZERO
    feed_types: tuple[FeedTypeSummary, ...] = ()
    projection: FeedProjection | None = None


@dataclass(frozen=True)
class ExpenseSuggestion:
    """One draft expense per category, pending user confirmation."""

    category: str
    amount: Decimal
    description: str
    vendor: str
    date: datetime.date
    is_deductible: bool
    tax_line: str
    line_items: tuple[LineItem, ...]
    subcategory: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ProcessingMetrics:
    total_processing_time_ms: float
    ocr_confidence: float
    categorization_confidence: float
    items_requiring_review: int
    stage_sources: tuple[tuple[str, str], ...] = ()
    review_threshold: float = 0.8  # items below this count as requiring review


@dataclass(frozen=True)
class ProcessingResult:
    receipt_data: StructuredReceipt
    line_items: tuple[LineItem, ...]
    suggested_expenses: tuple[ExpenseSuggestion, ...]
    feed_analysis: FeedSummary
    metrics: ProcessingMetrics
    warnings: tuple[str, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def needs_manual_entry(self) -> bool:
        """True when no line items were recovered at all."""
        return not self.line_items

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view. Money is rendered as decimal strings."""
        receipt = self.receipt_data
        return {
            "receipt_data": {
                "vendor": receipt.vendor,
                "total_amount": str(receipt.total_amount),
                "date": receipt.date.isoformat(),
                "receipt_number": receipt.receipt_number,
                "tax_amount": _money(receipt.tax_amount),
                "confidence": receipt.confidence,
                "status": receipt.status.value,
            },
            "line_items": [_item_dict(i) for i in self.line_items],
            "suggested_expenses": [
                {
                    "category": s.category,
                    "subcategory": s.subcategory,
                    "amount": str(s.amount),
                    "description": s.description,
                    "vendor": s.vendor,
                    "date": s.date.isoformat(),
                    "is_deductible": s.is_deductible,
                    "tax_line": s.tax_line,
                    "notes": s.notes,
                    "line_items": [_item_dict(i) for i in s.line_items],
                }
                for s in self.suggested_expenses
            ],
            "feed_analysis": {
                "total_feed_weight": self.feed_analysis.total_feed_weight,
                "estimated_feed_cost": str(self.feed_analysis.estimated_feed_cost),
                "feed_types": [
                    {
                        "name": f.name,
                        "weight": f.weight,
                        "cost": str(f.cost),
                        "category": f.category,
                    }
                    for f in self.feed_analysis.feed_types
                ],
                "projection": (
                    {
                        "estimated_daily_consumption": p.estimated_daily_consumption,
                        "days_of_feed_supply": p.days_of_feed_supply,
                        "cost_per_day": str(p.cost_per_day),
                    }
                    if (p := self.feed_analysis.projection) is not None
                    else None
                ),
            },
            "metrics": {
                "total_processing_time_ms": self.metrics.total_processing_time_ms,
                "ocr_confidence": self.metrics.ocr_confidence,
                "categorization_confidence": self.metrics.categorization_confidence,
                "items_requiring_review": self.metrics.items_requiring_review,
                "stage_sources": dict(self.metrics.stage_sources),
                "review_threshold": self.metrics.review_threshold,
            },
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ProcessingOptions:
    extract_feed_weights: bool = True
    categorize_line_items: bool = True
    validate_with_database: bool = False
    confidence_threshold: float = 0.8

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold must be within [0, 1], got {self.confidence_threshold}"
            )


@dataclass(frozen=True)
class ProcessReceiptRequest:
    image_ref: str  # path or file:// URI of the photographed receipt
    user_id: str
    options: ProcessingOptions = field(default_factory=ProcessingOptions)
    receipt_text: str | None = None  # on-device OCR text, if the caller has it
    animal_id: str | None = None


def _money(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _item_dict(item: LineItem) -> dict[str, Any]:
    return {
        "description": item.description,
        "amount": str(item.amount),
        "category": item.category,
        "subcategory": item.subcategory,
        "quantity": item.quantity,
        "unit_price": _money(item.unit_price),
        "unit_of_measure": item.unit_of_measure,
        "feed_weight": item.feed_weight,
        "feed_type": item.feed_type,
        "raw_text": item.raw_text,
        "confidence": item.confidence,
    }
