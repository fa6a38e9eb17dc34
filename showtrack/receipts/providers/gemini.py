"""Google Gemini provider."""

from __future__ import annotations

from ..errors import ProviderRequestFailed
from ..models import ExtractedText
from ..prompts import VISION_PROMPT
from . import VISION_TEXT_CONFIDENCE, ReceiptProvider, load_image

DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiProvider(ReceiptProvider):
    """Read and structure receipts with Gemini."""

    name = "gemini"

    def __init__(self, api_key: str = "", model: str = DEFAULT_MODEL) -> None:
        super().__init__(api_key, model)

    def _model_client(self):
        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(self._model)

    async def extract_text(self, image_ref: str) -> ExtractedText:
        self._require_key("GEMINI_API_KEY")
        data, media_type = load_image(image_ref)
        text = await self._generate([{"mime_type": media_type, "data": data}, VISION_PROMPT])
        return ExtractedText(text=text, confidence=VISION_TEXT_CONFIDENCE)

    async def complete(self, prompt: str) -> str:
        self._require_key("GEMINI_API_KEY")
        return await self._generate([prompt])

    async def _generate(self, parts: list) -> str:
        model = self._model_client()
        try:
            response = await model.generate_content_async(parts)
            return response.text
        except Exception as e:
            raise ProviderRequestFailed(f"Gemini request failed: {e}") from e
