"""Model provider base class and factory."""

from __future__ import annotations

import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from ..errors import ProviderRequestFailed, ProviderUnavailable
from ..models import ExtractedText

if TYPE_CHECKING:
    from ..config import ReceiptsConfig

# Confidence reported for text read by a vision model
VISION_TEXT_CONFIDENCE = 0.95


class ReceiptProvider(ABC):
    """A hosted model service usable for vision-to-text and text completion."""

    name: str = ""

    def __init__(self, api_key: str = "", model: str = "") -> None:
        self._api_key = api_key
        self._model = model

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _require_key(self, env_var: str) -> None:
        if not self._api_key:
            raise ProviderUnavailable(
                f"{self.name} API key is not set. "
                f"Check the config file or the {env_var} environment variable."
            )

    @abstractmethod
    async def extract_text(self, image_ref: str) -> ExtractedText:
        """Read the receipt text from an image."""
        ...

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the raw model response for a text-only prompt."""
        ...


def load_image(image_ref: str) -> tuple[bytes, str]:
    """Read image bytes and guess the media type.

    *image_ref* is a filesystem path or a ``file://`` URI.

    Raises:
        ProviderRequestFailed: If the image cannot be read.
    """
    if image_ref.startswith("file://"):
        path = unquote(urlparse(image_ref).path)
    else:
        path = image_ref
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ProviderRequestFailed(f"cannot read receipt image {image_ref!r}: {e}") from e
    media_type = mimetypes.guess_type(path)[0] or "image/jpeg"
    return data, media_type


def create_provider(name: str, config: ReceiptsConfig) -> ReceiptProvider:
    """Create a provider by name using the configured credentials."""
    match name:
        case "claude":
            from .claude import ClaudeProvider

            return ClaudeProvider(
                api_key=config.providers.claude.api_key,
                model=config.providers.claude.model,
            )
        case "gemini":
            from .gemini import GeminiProvider

            return GeminiProvider(
                api_key=config.providers.gemini.api_key,
                model=config.providers.gemini.model,
            )
        case _:
            raise ValueError(
                f"Unknown provider: {name!r} (choose claude or gemini)"
            )
