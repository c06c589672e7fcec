"""Runtime configuration helpers for pitchlab."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o"


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _get_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def get_env() -> Optional[str]:
    return _get_env("ENV") or _get_env("APP_ENV")


def is_dev_env() -> bool:
    env = (get_env() or "dev").lower()
    return env in {"dev", "local"}


def get_openai_api_key() -> Optional[str]:
    return _get_env("OPENAI_API_KEY")


def get_openai_base_url() -> str:
    return (_get_env("OPENAI_BASE_URL") or DEFAULT_OPENAI_BASE_URL).rstrip("/")


def get_openai_model() -> str:
    return _get_env("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL


def get_openai_timeout_seconds() -> float:
    return _get_float("OPENAI_TIMEOUT_SECONDS", 60.0)


def get_memory_backend() -> str:
    backend = (_get_env("MEMORY_BACKEND") or "").lower()
    if backend:
        return backend
    return "openai" if get_openai_api_key() else "memory"


def get_port() -> int:
    return _get_int("PORT", 5000)


@dataclass(frozen=True)
class GenerationSettings:
    temperature: float = 0.8
    max_tokens: int = 200


@dataclass(frozen=True)
class SessionSettings:
    idle_ttl_seconds: float = 30 * 60
    sweep_interval_seconds: float = 10 * 60


def get_generation_settings() -> GenerationSettings:
    return GenerationSettings(
        temperature=_get_float("REPLY_TEMPERATURE", GenerationSettings.temperature),
        max_tokens=_get_int("REPLY_MAX_TOKENS", GenerationSettings.max_tokens),
    )


def get_session_settings() -> SessionSettings:
    return SessionSettings(
        idle_ttl_seconds=_get_float("SESSION_IDLE_TTL_SECONDS", SessionSettings.idle_ttl_seconds),
        sweep_interval_seconds=_get_float(
            "SESSION_SWEEP_INTERVAL_SECONDS", SessionSettings.sweep_interval_seconds
        ),
    )
