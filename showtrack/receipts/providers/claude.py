"""Anthropic Claude provider."""

from __future__ import annotations

import base64

from ..errors import ProviderRequestFailed
from ..models import ExtractedText
from ..prompts import VISION_PROMPT
from . import VISION_TEXT_CONFIDENCE, ReceiptProvider, load_image

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def _import_sdk():
    try:
        import anthropic
    except ImportError:
        raise ImportError(
            "anthropic SDK is required: pip install anthropic"
        ) from None
    return anthropic


class ClaudeProvider(ReceiptProvider):
    """Read and structure receipts with Claude."""

    name = "claude"

    def __init__(self, api_key: str = "", model: str = DEFAULT_MODEL) -> None:
        super().__init__(api_key, model)

    async def extract_text(self, image_ref: str) -> ExtractedText:
        self._require_key("ANTHROPIC_API_KEY")
        data, media_type = load_image(image_ref)
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": base64.standard_b64encode(data).decode(),
                },
            },
            {"type": "text", "text": VISION_PROMPT},
        ]
        text = await self._create(content, max_tokens=2000)
        return ExtractedText(text=text, confidence=VISION_TEXT_CONFIDENCE)

    async def complete(self, prompt: str) -> str:
        self._require_key("ANTHROPIC_API_KEY")
        return await self._create(prompt, max_tokens=1500)

    async def _create(self, content: str | list[dict], max_tokens: int) -> str:
        anthropic = _import_sdk()
        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                temperature=0.1,
                messages=[{"role": "user", "content": content}],
            )
        except Exception as e:
            raise ProviderRequestFailed(f"Claude request failed: {e}") from e

        for block in response.content or ():
            if getattr(block, "type", None) == "text":
                return block.text
        raise ProviderRequestFailed("Claude returned no text content")
