"""Tests for manual review edits."""

import asyncio
from decimal import Decimal

import pytest

from showtrack.receipts.models import FeedSummary, ProcessReceiptRequest
from showtrack.receipts.pipeline import ReceiptPipeline
from showtrack.receipts.review import bulk_recategorize, recategorize_item, set_feed_weight
from showtrack.receipts.samples import DEMO_RECEIPT_TEXT


@pytest.fixture
def result():
    pipeline = ReceiptPipeline(None, None, sample_text=DEMO_RECEIPT_TEXT)
    return asyncio.run(
        pipeline.process_receipt(
            ProcessReceiptRequest(image_ref="/tmp/receipt.jpg", user_id="user-1")
        )
    )


class TestRecategorizeItem:
    def test_moves_item_and_rebuilds(self, result):
        edited = recategorize_item(result, 2, "show_entries")
        item = edited.line_items[2]
        assert item.category == "show_entries"
        assert item.subcategory == "Entry Fees"
        assert item.confidence == 1.0
        assert [(s.category, s.amount) for s in edited.suggested_expenses] == [
            ("feed", Decimal("74.79")),
            ("show_entries", Decimal("5.29")),
        ]
        assert edited.metrics.categorization_confidence == pytest.approx((0.8 + 0.8 + 1.0) / 3)

    def test_original_untouched(self, result):
        recategorize_item(result, 2, "show_entries", "Premium Books")
        assert result.line_items[2].category == "supplies"
        assert len(result.suggested_expenses) == 2

    def test_explicit_subcategory(self, result):
        edited = recategorize_item(result, 2, "supplies", "Show Supplies")
        assert edited.line_items[2].subcategory == "Show Supplies"
        assert edited.suggested_expenses[1].subcategory == "Show Supplies"

    def test_feeder_moved_to_equipment(self, result):
        edited = recategorize_item(result, 1, "equipment")
        assert edited.line_items[1].feed_type is None
        assert [(s.category, s.amount) for s in edited.suggested_expenses] == [
            ("feed", Decimal("57.00")),
            ("equipment", Decimal("17.79")),
            ("supplies", Decimal("5.29")),
        ]
        assert edited.warnings == ("1 feed items are missing weight information",)

    def test_moving_feed_out_clears_feed_data(self, result):
        edited = recategorize_item(recategorize_item(result, 1, "equipment"), 0, "supplies")
        assert edited.line_items[0].feed_weight is None
        assert edited.feed_analysis == FeedSummary()
        assert edited.warnings == ()

    def test_invalid_arguments(self, result):
        with pytest.raises(ValueError, match="Unknown category"):
            recategorize_item(result, 0, "groceries")
        with pytest.raises(IndexError):
            recategorize_item(result, 3, "feed")


class TestSetFeedWeight:
    def test_sets_weight(self, result):
        assert result.warnings == ("2 feed items are missing weight information",)
        edited = set_feed_weight(result, 0, 100)
        assert edited.line_items[0].feed_weight == 100.0
        assert edited.warnings == ("1 feed items are missing weight information",)
        assert edited.feed_analysis.total_feed_weight == 100.0
        assert edited.feed_analysis.projection.estimated_daily_consumption == 3.33

    def test_rejects_non_feed_and_negative(self, result):
        with pytest.raises(ValueError, match="not feed"):
            set_feed_weight(result, 2, 10)
        with pytest.raises(ValueError):
            set_feed_weight(result, 0, -1)


class TestBulkRecategorize:
    def test_moves_all_matching(self, result):
        edited = bulk_recategorize(result, "feed", "supplies")
        assert [i.category for i in edited.line_items] == ["supplies", "supplies", "supplies"]
        (supplies,) = edited.suggested_expenses
        assert supplies.amount == Decimal("80.08")
        assert supplies.description == "Supplies from STRUTTY'S (3 items)"
        assert edited.line_items[0].confidence == 1.0
        assert edited.line_items[2].confidence == 0.8
        assert edited.feed_analysis == FeedSummary()

    def test_no_matches_is_a_copy(self, result):
        edited = bulk_recategorize(result, "labor", "other")
        assert edited.line_items == result.line_items
        assert edited.suggested_expenses == result.suggested_expenses
