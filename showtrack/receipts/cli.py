"""CLI entry point for receipt processing."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

from .categories import CATEGORIES
from .config import load_config
from .errors import AllProvidersExhausted
from .log import configure_logging
from .models import ProcessingResult, ProcessReceiptRequest
from .pipeline import ReceiptPipeline


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="showtrack-receipts",
        description="Turn a receipt photo into categorized livestock expense suggestions",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )

    sub = parser.add_subparsers(dest="command")

    # categories
    sub.add_parser("categories", help="List expense categories and tax lines")

    # process
    process_parser = sub.add_parser("process", help="Process a receipt image")
    process_parser.add_argument("image", type=str, help="Receipt image path or file:// URI")
    process_parser.add_argument(
        "--text-file", type=str, default=None, metavar="FILE",
        help="On-device OCR text to use when no provider can read the image",
    )
    process_parser.add_argument("--user", type=str, default="local", help="User id")
    process_parser.add_argument("--json", action="store_true", help="Output JSON")
    process_parser.add_argument(
        "--no-feed-weights", action="store_true",
        help="Do not extract feed weights",
    )
    process_parser.add_argument(
        "--no-categorize", action="store_true",
        help="Leave line items uncategorized",
    )
    process_parser.add_argument(
        "--validate-vendor", action="store_true",
        help="Match the vendor against known suppliers",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    configure_logging(config.logging.level, json_format=config.logging.json)

    match args.command:
        case "categories":
            _cmd_categories()
        case "process":
            asyncio.run(_cmd_process(config, args))


def _cmd_categories() -> None:
    for info in CATEGORIES.values():
        deductible = "" if info.is_deductible else " (not deductible)"
        print(f"{info.id:<22} {info.label:<28} {info.tax_line}{deductible}")


async def _cmd_process(config, args) -> None:
    receipt_text = None
    if args.text_file:
        receipt_text = Path(args.text_file).read_text(encoding="utf-8")

    options = config.processing_options()
    if args.no_feed_weights:
        options = replace(options, extract_feed_weights=False)
    if args.no_categorize:
        options = replace(options, categorize_line_items=False)
    if args.validate_vendor:
        options = replace(options, validate_with_database=True)

    request = ProcessReceiptRequest(
        image_ref=args.image,
        user_id=args.user,
        options=options,
        receipt_text=receipt_text,
    )

    pipeline = ReceiptPipeline.from_config(config)
    try:
        result = await pipeline.process_receipt(request)
    except AllProvidersExhausted as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_result(result)


def _print_result(result: ProcessingResult) -> None:
    receipt = result.receipt_data
    print(f"{receipt.vendor}  {receipt.date.isoformat()}  total ${receipt.total_amount}")
    if receipt.receipt_number:
        print(f"Receipt #{receipt.receipt_number}")

    if result.needs_manual_entry:
        print("\nNo line items found. Please enter the expense manually.")
    else:
        print(f"\nLine items ({len(result.line_items)}):")
        for item in result.line_items:
            weight = f"  {item.feed_weight:g} lb" if item.feed_weight else ""
            print(
                f"  {item.description:<36} ${item.amount:>8}  "
                f"[{item.category}] {item.confidence:.0%}{weight}"
            )

    if result.suggested_expenses:
        print("\nSuggested expenses:")
        for s in result.suggested_expenses:
            print(f"  {s.category:<22} ${s.amount:>8}  {s.description}  ({s.tax_line})")

    feed = result.feed_analysis
    if feed.feed_types:
        print(f"\nFeed: {feed.total_feed_weight:g} lb for ${feed.estimated_feed_cost}")
        if feed.projection is not None:
            print(
                f"  ~{feed.projection.estimated_daily_consumption:g} lb/day, "
                f"${feed.projection.cost_per_day}/day over "
                f"{feed.projection.days_of_feed_supply} days"
            )

    for warning in result.warnings:
        print(f"! {warning}")
