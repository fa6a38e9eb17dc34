"""TOML configuration loader for receipt processing."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .models import ProcessingOptions

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class ClaudeProviderConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiProviderConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class ProvidersConfig:
    primary: str = "claude"
    fallback: str = "gemini"
    claude: ClaudeProviderConfig = field(default_factory=ClaudeProviderConfig)
    gemini: GeminiProviderConfig = field(default_factory=GeminiProviderConfig)


@dataclass
class ProcessingConfig:
    extract_feed_weights: bool = True
    categorize_line_items: bool = True
    validate_with_database: bool = False
    confidence_threshold: float = 0.8
    demo_mode: bool = False  # use the bundled sample receipt when nothing else is readable


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass
class ReceiptsConfig:
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def processing_options(self) -> ProcessingOptions:
        """Default per-request options derived from ``[processing]``."""
        return ProcessingOptions(
            extract_feed_weights=self.processing.extract_feed_weights,
            categorize_line_items=self.processing.categorize_line_items,
            validate_with_database=self.processing.validate_with_database,
            confidence_threshold=self.processing.confidence_threshold,
        )


def load_config(path: str | Path | None = None) -> ReceiptsConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys missing from the file are read from ``ANTHROPIC_API_KEY`` and
    ``GEMINI_API_KEY``.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    prv = raw.get("providers", {})
    prc = raw.get("processing", {})
    log = raw.get("logging", {})

    claude_cfg = prv.get("claude", {})
    gemini_cfg = prv.get("gemini", {})

    # Resolve API keys: config file → environment variable
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )

    return ReceiptsConfig(
        providers=ProvidersConfig(
            primary=prv.get("primary", "claude"),
            fallback=prv.get("fallback", "gemini"),
            claude=ClaudeProviderConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiProviderConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        processing=ProcessingConfig(
            extract_feed_weights=prc.get("extract_feed_weights", True),
            categorize_line_items=prc.get("categorize_line_items", True),
            validate_with_database=prc.get("validate_with_database", False),
            confidence_threshold=prc.get("confidence_threshold", 0.8),
            demo_mode=prc.get("demo_mode", False),
        ),
        logging=LoggingConfig(
            level=log.get("level", "INFO"),
            json=log.get("json", False),
        ),
    )
