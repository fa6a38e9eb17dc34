"""Tests for receipts config loading."""

from showtrack.receipts.config import ReceiptsConfig, load_config
from showtrack.receipts.models import ProcessingOptions


def test_load_config_defaults(monkeypatch):
    """Loading with no path returns all defaults."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    config = load_config()
    assert isinstance(config, ReceiptsConfig)
    assert config.providers.primary == "claude"
    assert config.providers.fallback == "gemini"
    assert config.providers.claude.api_key == ""
    assert config.providers.gemini.model == "gemini-2.0-flash"
    assert config.processing.extract_feed_weights is True
    assert config.processing.confidence_threshold == 0.8
    assert config.processing.demo_mode is False
    assert config.logging.level == "INFO"
    assert config.logging.json is False


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.providers.primary == "claude"


def test_load_config_from_toml(tmp_path):
    """Loading a valid TOML file populates config."""
    path = tmp_path / "receipts.toml"
    path.write_bytes(b"""\
[providers]
primary = "gemini"
fallback = "claude"

[providers.gemini]
api_key = "test-key-123"
model = "gemini-pro"

[processing]
extract_feed_weights = false
validate_with_database = true
confidence_threshold = 0.9
demo_mode = true

[logging]
level = "DEBUG"
json = true
""")
    config = load_config(path)

    assert config.providers.primary == "gemini"
    assert config.providers.fallback == "claude"
    assert config.providers.gemini.api_key == "test-key-123"
    assert config.providers.gemini.model == "gemini-pro"
    assert config.processing.extract_feed_weights is False
    assert config.processing.validate_with_database is True
    assert config.processing.confidence_threshold == 0.9
    assert config.processing.demo_mode is True
    assert config.logging.level == "DEBUG"
    assert config.logging.json is True


def test_api_keys_from_environment(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-claude")
    monkeypatch.setenv("GEMINI_API_KEY", "env-gemini")
    config = load_config()
    assert config.providers.claude.api_key == "env-claude"
    assert config.providers.gemini.api_key == "env-gemini"


def test_file_key_wins_over_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-claude")
    path = tmp_path / "receipts.toml"
    path.write_text('[providers.claude]\napi_key = "file-claude"\n')
    config = load_config(path)
    assert config.providers.claude.api_key == "file-claude"


def test_processing_options():
    config = load_config()
    config.processing.categorize_line_items = False
    config.processing.confidence_threshold = 0.5
    options = config.processing_options()
    assert isinstance(options, ProcessingOptions)
    assert options.categorize_line_items is False
    assert options.confidence_threshold == 0.5
    assert options.extract_feed_weights is True
