"""
Tests for environment-based settings.
"""
import pytest

from visa_fees.config import DEFAULT_AI_MODEL, Settings

ENV_KEYS = (
    "ENVIRONMENT",
    "ANTHROPIC_API_KEY",
    "AI_VALIDATION_ENABLED",
    "AI_MODEL",
    "AI_MAX_TOKENS",
    "SEED_DEMO_DATA",
    "DELETE_LATENCY_SECONDS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = Settings()

    assert settings.environment == "development"
    assert settings.ai_validation_enabled is True
    assert settings.ai_model == DEFAULT_AI_MODEL
    assert settings.ai_max_tokens == 512
    assert settings.seed_demo_data is True
    assert settings.delete_latency_seconds == 0.5
    assert settings.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("AI_VALIDATION_ENABLED", "False")
    monkeypatch.setenv("SEED_DEMO_DATA", "0")
    monkeypatch.setenv("DELETE_LATENCY_SECONDS", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.ai_validation_enabled is False
    assert settings.seed_demo_data is False
    assert settings.delete_latency_seconds == 0.0
    assert settings.log_level == "DEBUG"


def test_production_requires_api_key(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")

    with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
        Settings()


def test_production_without_ai_needs_no_key(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("AI_VALIDATION_ENABLED", "false")

    assert Settings().anthropic_api_key == ""


def test_development_warns_about_missing_key(caplog):
    with caplog.at_level("WARNING"):
        Settings()

    assert "Missing ANTHROPIC_API_KEY" in caplog.text
