"""Unit tests for config.py"""

import pytest

from config import get_settings, reset_settings, validate_required_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Rebuild the settings singleton around each test."""
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LLM_MODEL", raising=False)
        monkeypatch.delenv("LLM_MAX_TOKENS", raising=False)

        settings = get_settings()

        assert settings.llm_model == "gpt-4o-mini"
        assert settings.llm_max_tokens == 800

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "gpt-4o")
        monkeypatch.setenv("ADMIN_API_TOKEN", "s3cret")

        settings = get_settings()

        assert settings.llm_model == "gpt-4o"
        assert settings.admin_api_token == "s3cret"

    def test_singleton_until_reset(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("LLM_MODEL", "gpt-4.1-mini")
        reset_settings()

        assert get_settings() is not first
        assert get_settings().llm_model == "gpt-4.1-mini"


class TestValidateRequiredSettings:
    def test_missing_database_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "")

        with pytest.raises(ValueError, match="DATABASE_URL"):
            validate_required_settings()

    def test_missing_api_key_only_warns(self, monkeypatch, caplog):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
        monkeypatch.setenv("OPENAI_API_KEY", "")

        validate_required_settings()

        assert "OPENAI_API_KEY is not set" in caplog.text
