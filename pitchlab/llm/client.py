"""Chat-completion client for the buyer simulation.

One HTTP call per completion. No retry loop; the httpx timeout is the only
timeout applied. Callers may pass their own client in tests.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from pitchlab.common.errors import CompletionError
from pitchlab.config import runtime_config

logger = logging.getLogger(__name__)

ChatMessage = Dict[str, str]


class CompletionClient(Protocol):
    async def complete(
        self,
        messages: List[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> Optional[str]: ...


class OpenAIChatCompletionClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        key = api_key or runtime_config.get_openai_api_key()
        if not key and client is None:
            raise RuntimeError("OPENAI_API_KEY is required for chat completions")
        self.model = model or runtime_config.get_openai_model()
        self._client = client or httpx.AsyncClient(
            base_url=base_url or runtime_config.get_openai_base_url(),
            headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
            timeout=timeout or runtime_config.get_openai_timeout_seconds(),
        )

    async def complete(
        self,
        messages: List[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> Optional[str]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            resp = await self._client.post("/chat/completions", json=payload)
        except httpx.HTTPError as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise CompletionError(
                _describe_http_error(resp),
                details={"status_code": resp.status_code},
            )
        return _first_choice_text(resp.json())

    async def aclose(self) -> None:
        await self._client.aclose()


def _describe_http_error(resp: httpx.Response) -> str:
    message = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        message = error.get("message")
    elif isinstance(error, str):
        message = error
    if message:
        return f"Completion API HTTP {resp.status_code}: {message}"
    return f"Completion API HTTP {resp.status_code}"


def _first_choice_text(body: Dict[str, Any]) -> Optional[str]:
    choices = body.get("choices") or []
    if not choices:
        return None
    message = choices[0].get("message") or {}
    return message.get("content")


def completion_client_from_env() -> CompletionClient:
    return OpenAIChatCompletionClient()
