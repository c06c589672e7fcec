import pytest

from pitchlab.config import runtime_config


def test_generation_settings_defaults(monkeypatch):
    monkeypatch.delenv("REPLY_TEMPERATURE", raising=False)
    monkeypatch.delenv("REPLY_MAX_TOKENS", raising=False)
    settings = runtime_config.get_generation_settings()
    assert settings.temperature == 0.8
    assert settings.max_tokens == 200


def test_session_settings_from_env(monkeypatch):
    monkeypatch.setenv("SESSION_IDLE_TTL_SECONDS", "120")
    monkeypatch.setenv("SESSION_SWEEP_INTERVAL_SECONDS", "15")
    settings = runtime_config.get_session_settings()
    assert settings.idle_ttl_seconds == 120
    assert settings.sweep_interval_seconds == 15


def test_bad_numeric_env_is_reported(monkeypatch):
    monkeypatch.setenv("REPLY_MAX_TOKENS", "lots")
    with pytest.raises(RuntimeError):
        runtime_config.get_generation_settings()


def test_memory_backend_defaults_follow_api_key(monkeypatch):
    monkeypatch.delenv("MEMORY_BACKEND", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert runtime_config.get_memory_backend() == "memory"
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert runtime_config.get_memory_backend() == "openai"
    monkeypatch.setenv("MEMORY_BACKEND", "Memory")
    assert runtime_config.get_memory_backend() == "memory"


def test_openai_base_url_strips_trailing_slash(monkeypatch):
    monkeypatch.setenv("OPENAI_BASE_URL", "https://proxy.example/v1/")
    assert runtime_config.get_openai_base_url() == "https://proxy.example/v1"
