"""Tests for model providers (mocked API calls)."""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from showtrack.receipts.config import load_config
from showtrack.receipts.errors import ProviderRequestFailed, ProviderUnavailable
from showtrack.receipts.providers import ReceiptProvider, create_provider, load_image
from showtrack.receipts.providers.claude import ClaudeProvider
from showtrack.receipts.providers.gemini import GeminiProvider


@pytest.fixture
def receipt_image(tmp_path):
    img = tmp_path / "receipt.jpg"
    img.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return img


def _mock_anthropic(text=None, error=None, blocks=None):
    mock_response = MagicMock()
    mock_response.content = blocks if blocks is not None else [MagicMock(type="text", text=text)]

    mock_client = AsyncMock()
    if error is not None:
        mock_client.messages.create = AsyncMock(side_effect=error)
    else:
        mock_client.messages.create = AsyncMock(return_value=mock_response)

    mock_anthropic = MagicMock()
    mock_anthropic.AsyncAnthropic.return_value = mock_client
    return mock_anthropic, mock_client


def _mock_genai(text=None, error=None):
    mock_model = MagicMock()
    if error is not None:
        mock_model.generate_content_async = AsyncMock(side_effect=error)
    else:
        mock_model.generate_content_async = AsyncMock(return_value=MagicMock(text=text))

    mock_genai = MagicMock()
    mock_genai.GenerativeModel.return_value = mock_model
    mock_google = MagicMock()
    mock_google.generativeai = mock_genai
    modules = {"google": mock_google, "google.generativeai": mock_genai}
    return modules, mock_genai, mock_model


class TestCreateProvider:
    def test_create_claude_provider(self):
        config = load_config()
        provider = create_provider(config.providers.primary, config)
        assert isinstance(provider, ClaudeProvider)
        assert isinstance(provider, ReceiptProvider)

    def test_create_gemini_provider(self):
        config = load_config()
        provider = create_provider(config.providers.fallback, config)
        assert isinstance(provider, GeminiProvider)

    def test_create_unknown_provider(self):
        config = load_config()
        with pytest.raises(ValueError, match="Unknown provider"):
            create_provider("openai", config)

    def test_configured(self):
        assert ClaudeProvider(api_key="k").configured
        assert not ClaudeProvider(api_key="").configured


class TestLoadImage:
    def test_path(self, receipt_image):
        data, media_type = load_image(str(receipt_image))
        assert data.startswith(b"\xff\xd8")
        assert media_type == "image/jpeg"

    def test_file_uri(self, receipt_image):
        data, _ = load_image(receipt_image.as_uri())
        assert data.startswith(b"\xff\xd8")

    def test_png_media_type(self, tmp_path):
        img = tmp_path / "receipt.png"
        img.write_bytes(b"\x89PNG")
        assert load_image(str(img))[1] == "image/png"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProviderRequestFailed, match="cannot read"):
            load_image(str(tmp_path / "missing.jpg"))


class TestClaudeProvider:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        provider = ClaudeProvider(api_key="")
        with pytest.raises(ProviderUnavailable, match="API key"):
            await provider.extract_text("/tmp/receipt.jpg")
        with pytest.raises(ProviderUnavailable, match="ANTHROPIC_API_KEY"):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_extract_text_mocked(self, receipt_image):
        mock_anthropic, mock_client = _mock_anthropic(text="RURAL KING\nHAY 12.00")

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            provider = ClaudeProvider(api_key="test-key")
            result = await provider.extract_text(str(receipt_image))

        assert result.text == "RURAL KING\nHAY 12.00"
        assert result.confidence == 0.95
        mock_anthropic.AsyncAnthropic.assert_called_once_with(api_key="test-key")
        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert content[0]["source"]["media_type"] == "image/jpeg"
        assert content[1]["type"] == "text"

    @pytest.mark.asyncio
    async def test_complete_mocked(self):
        mock_anthropic, mock_client = _mock_anthropic(text='{"vendor": "Co-op"}')

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            provider = ClaudeProvider(api_key="test-key", model="claude-test")
            raw = await provider.complete("structure this")

        assert raw == '{"vendor": "Co-op"}'
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"][0]["content"] == "structure this"

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self):
        mock_anthropic, _ = _mock_anthropic(error=RuntimeError("overloaded"))

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            provider = ClaudeProvider(api_key="test-key")
            with pytest.raises(ProviderRequestFailed, match="overloaded") as exc_info:
                await provider.complete("prompt")

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_unreadable_image(self, tmp_path):
        provider = ClaudeProvider(api_key="test-key")
        with pytest.raises(ProviderRequestFailed):
            await provider.extract_text(str(tmp_path / "missing.jpg"))

    @pytest.mark.asyncio
    async def test_skips_non_text_blocks(self):
        thinking = MagicMock(spec=["type", "thinking"], type="thinking")
        text = MagicMock(type="text", text='{"vendor": "Co-op"}')
        mock_anthropic, _ = _mock_anthropic(blocks=[thinking, text])

        with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
            raw = await ClaudeProvider(api_key="test-key").complete("prompt")

        assert raw == '{"vendor": "Co-op"}'

    @pytest.mark.asyncio
    async def test_no_text_block(self):
        tool_use = MagicMock(spec=["type", "input"], type="tool_use")
        for blocks in ([], [tool_use]):
            mock_anthropic, _ = _mock_anthropic(blocks=blocks)
            with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
                with pytest.raises(ProviderRequestFailed, match="no text content"):
                    await ClaudeProvider(api_key="test-key").complete("prompt")


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        provider = GeminiProvider(api_key="")
        with pytest.raises(ProviderUnavailable, match="GEMINI_API_KEY"):
            await provider.extract_text("/tmp/receipt.jpg")

    @pytest.mark.asyncio
    async def test_extract_text_mocked(self, receipt_image):
        modules, mock_genai, mock_model = _mock_genai(text="TRACTOR SUPPLY\nFEED 50LB 18.99")

        with patch.dict(sys.modules, modules):
            provider = GeminiProvider(api_key="test-key")
            result = await provider.extract_text(str(receipt_image))

        assert result.text.startswith("TRACTOR SUPPLY")
        mock_genai.configure.assert_called_once_with(api_key="test-key")
        parts = mock_model.generate_content_async.call_args.args[0]
        assert parts[0]["mime_type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_complete_mocked(self):
        modules, mock_genai, _ = _mock_genai(text="[]")

        with patch.dict(sys.modules, modules):
            provider = GeminiProvider(api_key="test-key", model="gemini-test")
            raw = await provider.complete("items please")

        assert raw == "[]"
        mock_genai.GenerativeModel.assert_called_once_with("gemini-test")

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self):
        modules, _, _ = _mock_genai(error=ValueError("blocked"))

        with patch.dict(sys.modules, modules):
            provider = GeminiProvider(api_key="test-key")
            with pytest.raises(ProviderRequestFailed, match="blocked"):
                await provider.complete("prompt")
