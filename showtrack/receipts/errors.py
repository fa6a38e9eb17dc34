"""Exception taxonomy for receipt processing."""

from __future__ import annotations


class ReceiptProcessingError(Exception):
    """Base class for all receipt pipeline errors."""


class StepFailed(ReceiptProcessingError):
    """A single pipeline step could not produce a result.

    Always caught at the step that raised it and resolved by the next,
    lower-trust strategy for the same step.
    """


class ProviderUnavailable(StepFailed):
    """The provider has no credential configured."""


class ProviderRequestFailed(StepFailed):
    """The provider call failed (network, HTTP, SDK or image read error)."""


class ResponseParseFailed(StepFailed):
    """Sanitized provider output still was not the expected JSON."""


class NoItemsFound(StepFailed):
    """A step finished but produced zero line items."""


class AllProvidersExhausted(ReceiptProcessingError):
    """Every provider and local fallback failed to produce usable data."""

    def __init__(self, failures: list[str] | None = None) -> None:
        self.failures = list(failures or [])
        detail = "; ".join(self.failures) if self.failures else "no text source"
        super().__init__(
            "Receipt could not be read automatically. "
            f"Please enter the expense manually. ({detail})"
        )
