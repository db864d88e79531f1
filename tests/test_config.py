import pytest
from pydantic import ValidationError
from shopping_list_engine.config import Config
from shopping_list_engine.categorizer import CATEGORIES


def test_config_reads_api_key_from_env(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key-123")
    config = Config()
    assert config.anthropic_api_key == "test-key-123"
    assert config.ai_available is True


def test_config_without_api_key_is_usable(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    config = Config(_env_file=None)
    assert config.anthropic_api_key == ""
    assert config.ai_available is False


def test_config_default_sections():
    config = Config(_env_file=None)
    assert config.store_sections == list(CATEGORIES)


def test_config_rejects_unknown_sections():
    with pytest.raises(ValidationError, match="Unknown store sections: Frozen"):
        Config(_env_file=None, store_sections=["Produce", "Frozen"])


def test_config_reads_directory_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SHOPPING_LISTS_DIR", str(tmp_path))
    assert Config(_env_file=None).shopping_lists_dir == tmp_path


def test_config_reads_price_hints_from_env(monkeypatch):
    monkeypatch.setenv("PRICE_HINTS", '{"saffron": 12.5}')
    assert Config(_env_file=None).price_hints == {"saffron": 12.5}


def test_section_emoji_covers_all_sections():
    config = Config(_env_file=None)
    assert config.section_emoji.get("Produce") == "🥦"
    for section in config.store_sections:
        assert section in config.section_emoji, f"Missing emoji for section: {section}"


def test_system_prompt_asks_for_json():
    assert "JSON array" in Config(_env_file=None).system_prompt
