"""Receipt-to-expense extraction for livestock show projects."""

from .categories import CATEGORIES, CategoryInfo, category_choices, get_category
from .config import ReceiptsConfig, load_config
from .errors import (
    AllProvidersExhausted,
    NoItemsFound,
    ProviderRequestFailed,
    ProviderUnavailable,
    ReceiptProcessingError,
    ResponseParseFailed,
    StepFailed,
)
from .models import (
    ExpenseSuggestion,
    ExtractedText,
    FeedSummary,
    LineItem,
    ProcessingMetrics,
    ProcessingOptions,
    ProcessingResult,
    ProcessReceiptRequest,
    ReceiptStatus,
    StructuredReceipt,
)
from .pipeline import ReceiptPipeline
from .providers import ReceiptProvider, create_provider
from .review import bulk_recategorize, recategorize_item, set_feed_weight

__all__ = [
    "CATEGORIES",
    "CategoryInfo",
    "category_choices",
    "get_category",
    "ReceiptsConfig",
    "load_config",
    "ReceiptProcessingError",
    "StepFailed",
    "ProviderUnavailable",
    "ProviderRequestFailed",
    "ResponseParseFailed",
    "NoItemsFound",
    "AllProvidersExhausted",
    "ReceiptStatus",
    "ExtractedText",
    "StructuredReceipt",
    "LineItem",
    "FeedSummary",
    "ExpenseSuggestion",
    "ProcessingMetrics",
    "ProcessingResult",
    "ProcessingOptions",
    "ProcessReceiptRequest",
    "ReceiptPipeline",
    "ReceiptProvider",
    "create_provider",
    "recategorize_item",
    "set_feed_weight",
    "bulk_recategorize",
]
