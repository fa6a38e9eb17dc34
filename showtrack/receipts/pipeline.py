"""Receipt processing pipeline: provider fallback, categorization, summaries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from .categorizer import Categorizer, categorize
from .checks import build_warnings
from .errors import AllProvidersExhausted, StepFailed
from .extraction import provider_line_items, provider_structure
from .feed import analyze_feed
from .heuristics import parse_line_items, parse_structure
from .models import (
    ExtractedText,
    LineItem,
    ProcessingMetrics,
    ProcessingOptions,
    ProcessingResult,
    ProcessReceiptRequest,
    StructuredReceipt,
)
from .samples import DEMO_RECEIPT_TEXT
from .suggestions import build_suggestions
from .vendors import canonical_vendor

if TYPE_CHECKING:
    from .config import ReceiptsConfig
    from .providers import ReceiptProvider

logger = logging.getLogger(__name__)

# Confidence of text that did not come from a vision model
LOCAL_TEXT_CONFIDENCE = 0.75

Strategy = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class StepResult:
    """Outcome of one pipeline step after its strategy chain ran."""

    success: bool
    data: Any = None
    source: str = ""
    error: str | None = None


@dataclass(frozen=True)
class ExtractionPath:
    """A provider and whether any failure abandons the whole path."""

    provider: ReceiptProvider | None
    strict: bool


@dataclass(frozen=True)
class _Extraction:
    text: ExtractedText
    receipt: StructuredReceipt
    items: list[LineItem]
    sources: dict[str, str]


async def run_chain(stage: str, strategies: list[tuple[str, Strategy]]) -> StepResult:
    """Run *strategies* in order and return the first success.

    Strategies signal failure by raising StepFailed. Any other exception
    propagates.
    """
    _log_stage(stage, [name for name, _ in strategies])
    errors: list[str] = []
    for index, (source, strategy) in enumerate(strategies):
        try:
            data = await strategy()
        except StepFailed as e:
            errors.append(f"{source}: {e}")
            if index + 1 < len(strategies):
                logger.info(
                    "Stage %s: %s failed (%s), falling back to %s",
                    stage,
                    source,
                    e,
                    strategies[index + 1][0],
                    extra={"event": "stage_fallback", "stage": stage, "failed": source},
                )
            continue
        return StepResult(success=True, data=data, source=source)
    return StepResult(success=False, error="; ".join(errors) or "no strategy available")


def _log_stage(stage: str, sources: list[str]) -> None:
    logger.info(
        "Stage %s: trying %s",
        stage,
        ", ".join(sources),
        extra={"event": "stage_entered", "stage": stage},
    )


def _local(fn: Callable[..., Any], *args: Any) -> Strategy:
    async def run() -> Any:
        return fn(*args)

    return run


async def _extract_text(provider: ReceiptProvider, image_ref: str) -> ExtractedText:
    return await provider.extract_text(image_ref)


class ReceiptPipeline:
    """Turn a receipt photo into categorized expense suggestions.

    The primary provider is tried first on a strict path: any failing step
    abandons it. The fallback provider then runs on a lenient path where
    every step falls back to local heuristics on its own.

    Usage::

        pipeline = ReceiptPipeline(ClaudeProvider(key), GeminiProvider(key))
        result = await pipeline.process_receipt(request)
    """

    def __init__(
        self,
        primary: ReceiptProvider | None,
        fallback: ReceiptProvider | None,
        *,
        sample_text: str | None = None,
    ) -> None:
        self._paths: list[ExtractionPath] = []
        if primary is not None:
            self._paths.append(ExtractionPath(primary, strict=True))
        self._paths.append(ExtractionPath(fallback, strict=False))
        self._sample_text = sample_text

    @classmethod
    def from_config(cls, config: ReceiptsConfig) -> ReceiptPipeline:
        from .providers import create_provider

        return cls(
            create_provider(config.providers.primary, config),
            create_provider(config.providers.fallback, config),
            sample_text=DEMO_RECEIPT_TEXT if config.processing.demo_mode else None,
        )

    @property
    def paths(self) -> list[ExtractionPath]:
        return list(self._paths)

    async def process_receipt(self, request: ProcessReceiptRequest) -> ProcessingResult:
        """Process one receipt.

        Raises:
            AllProvidersExhausted: If no receipt text could be obtained from
                any provider or local source.
        """
        started = time.perf_counter()
        failures: list[str] = []

        extraction = None
        for path in self._paths:
            if not path.strict:
                extraction = await self._run_lenient(path.provider, request, failures)
                break
            try:
                extraction = await self._run_strict(path.provider, request)
                break
            except StepFailed as e:
                failures.append(f"{path.provider.name}: {e}")
                logger.warning(
                    "Provider %s failed for %s (user %s): %s",
                    path.provider.name,
                    request.image_ref,
                    request.user_id,
                    e,
                    extra={"event": "provider_path_failed", "provider": path.provider.name},
                )

        result = self._finish(extraction, request.options, started)
        logger.info(
            "Processed receipt %s for user %s: vendor=%s items=%d warnings=%d "
            "sources=%s (%d ms)",
            request.image_ref,
            request.user_id,
            result.receipt_data.vendor,
            len(result.line_items),
            len(result.warnings),
            dict(result.metrics.stage_sources),
            result.metrics.total_processing_time_ms,
            extra={"event": "receipt_processed", "warnings_count": len(result.warnings)},
        )
        return result

    async def _run_strict(
        self, provider: ReceiptProvider, request: ProcessReceiptRequest
    ) -> _Extraction:
        name = provider.name
        _log_stage("text", [name])
        text = await provider.extract_text(request.image_ref)
        _log_stage("structure", [name])
        receipt = await provider_structure(provider, text.text)
        _log_stage("line_items", [name])
        items = await provider_line_items(provider, text.text)

        categorize_source = "skipped"
        if request.options.categorize_line_items:
            _log_stage("categorize", [name])
            items = await Categorizer(provider).with_provider(items)
            categorize_source = name

        sources = {
            "text": name,
            "structure": name,
            "line_items": name,
            "categorize": categorize_source,
        }
        return _Extraction(text, receipt, items, sources)

    async def _run_lenient(
        self,
        provider: ReceiptProvider | None,
        request: ProcessReceiptRequest,
        failures: list[str],
    ) -> _Extraction:
        def remote(step: Callable[..., Awaitable[Any]], *args: Any) -> list[tuple[str, Strategy]]:
            if provider is None:
                return []
            return [(provider.name, lambda: step(*args))]

        text_step = await run_chain(
            "text",
            [
                *remote(_extract_text, provider, request.image_ref),
                ("request_text", _local(self._request_text, request)),
                ("demo_sample", _local(self._demo_text)),
            ],
        )
        if not text_step.success:
            failures.append(text_step.error)
            raise AllProvidersExhausted(failures)
        text: ExtractedText = text_step.data

        structure_step = await run_chain(
            "structure",
            [
                *remote(provider_structure, provider, text.text),
                ("heuristic", _local(parse_structure, text.text)),
            ],
        )
        items_step = await run_chain(
            "line_items",
            [
                *remote(provider_line_items, provider, text.text),
                ("heuristic", _local(parse_line_items, text.text)),
            ],
        )
        items: list[LineItem] = items_step.data

        categorize_source = "skipped"
        if request.options.categorize_line_items and items:
            categorizer = Categorizer(provider)
            categorize_step = await run_chain(
                "categorize",
                [
                    *remote(categorizer.with_provider, items),
                    ("heuristic", _local(categorize, items)),
                ],
            )
            items = categorize_step.data
            categorize_source = categorize_step.source

        sources = {
            "text": text_step.source,
            "structure": structure_step.source,
            "line_items": items_step.source,
            "categorize": categorize_source,
        }
        return _Extraction(text, structure_step.data, items, sources)

    @staticmethod
    def _request_text(request: ProcessReceiptRequest) -> ExtractedText:
        if request.receipt_text is None:
            raise StepFailed("no on-device receipt text supplied")
        return ExtractedText(text=request.receipt_text, confidence=LOCAL_TEXT_CONFIDENCE)

    def _demo_text(self) -> ExtractedText:
        if self._sample_text is None:
            raise StepFailed("demo mode is off")
        return ExtractedText(text=self._sample_text, confidence=LOCAL_TEXT_CONFIDENCE)

    @staticmethod
    def _finish(
        extraction: _Extraction, options: ProcessingOptions, started: float
    ) -> ProcessingResult:
        items = extraction.items
        if not options.extract_feed_weights:
            items = [replace(item, feed_weight=None) for item in items]

        receipt = extraction.receipt
        if options.validate_with_database:
            receipt = replace(receipt, vendor=canonical_vendor(receipt.vendor))

        suggestions = build_suggestions(
            items, receipt.vendor, receipt.date, receipt_number=receipt.receipt_number
        )
        warnings = build_warnings(items, check_feed_weights=options.extract_feed_weights)

        confidences = [item.confidence for item in items]
        metrics = ProcessingMetrics(
            total_processing_time_ms=round((time.perf_counter() - started) * 1000, 1),
            ocr_confidence=extraction.text.confidence,
            categorization_confidence=(
                sum(confidences) / len(confidences) if confidences else 0.0
            ),
            items_requiring_review=sum(
                1 for c in confidences if c < options.confidence_threshold
            ),
            stage_sources=tuple(extraction.sources.items()),
            review_threshold=options.confidence_threshold,
        )

        return ProcessingResult(
            receipt_data=receipt,
            line_items=tuple(items),
            suggested_expenses=tuple(suggestions),
            feed_analysis=analyze_feed(items, extract_weights=options.extract_feed_weights),
            metrics=metrics,
            warnings=tuple(warnings),
        )
