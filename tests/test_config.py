"""Tests for settings loading."""

from equity_research.config import get_config, reset_config


def test_defaults():
    config = get_config()
    assert config.llm_provider == "openrouter"
    assert config.fmp_base_url == "https://financialmodelingprep.com/api/v3"
    assert config.testing_mode is False
    assert get_config() is config


def test_keys_are_stripped(monkeypatch):
    monkeypatch.setenv("FMP_API_KEY", '  "abc123" ')
    monkeypatch.setenv("OPENROUTER_API_KEY", "'or-key'\t")
    reset_config()
    config = get_config()
    assert config.fmp_api_key == "abc123"
    assert config.openrouter_api_key == "or-key"


def test_env_file_is_read(tmp_path):
    # conftest runs every test from an empty tmp_path
    (tmp_path / ".env").write_text("TESTING_MODE=true\nPORT=9000\n")
    reset_config()
    config = get_config()
    assert config.testing_mode is True
    assert config.port == 9000
