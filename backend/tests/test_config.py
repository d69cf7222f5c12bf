"""Tests for application settings."""

import warnings

import pytest

from app.config import DEFAULT_AI_GATEWAY_URL, DEFAULT_AI_MODEL, Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "AI_GATEWAY_API_KEY", "AI_GATEWAY_URL", "AI_MODEL", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        settings = Settings(_env_file=None)

    assert settings.ai_gateway_url == DEFAULT_AI_GATEWAY_URL
    assert settings.ai_model == DEFAULT_AI_MODEL
    assert settings.ai_timeout_seconds == 30.0
    assert settings.ai_max_retries == 2
    assert settings.cors_origins == "*"


def test_missing_credentials_warn(clean_env):
    with pytest.warns(UserWarning, match="AI_GATEWAY_API_KEY"):
        Settings(_env_file=None)


def test_reads_environment(clean_env):
    clean_env.setenv("AI_GATEWAY_API_KEY", "secret")
    clean_env.setenv("DATABASE_URL", "postgresql+asyncpg://app:pw@db:5432/symptoms")
    clean_env.setenv("AI_MAX_RETRIES", "5")

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        settings = Settings(_env_file=None)

    assert settings.ai_gateway_api_key == "secret"
    assert settings.ai_max_retries == 5
