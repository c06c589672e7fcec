"""Conversational-memory backends.

A memory thread is an append-only, ordered log of user/assistant turns held
outside the process. It is the only source of truth for message content;
callers re-read it instead of caching message bodies.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Protocol

import httpx

from pitchlab.common.errors import MemoryProviderError, ThreadNotFound
from pitchlab.config import runtime_config
from pitchlab.memory.models import ThreadMessage, ThreadRole

logger = logging.getLogger(__name__)


class ConversationMemory(Protocol):
    async def create_thread(self) -> str: ...

    async def append_user_message(self, thread_ref: str, text: str) -> None: ...

    async def append_assistant_message(self, thread_ref: str, text: str) -> None: ...

    async def list_messages(self, thread_ref: str) -> List[ThreadMessage]: ...


class InMemoryConversationMemory:
    """Process-local memory threads preserving append order."""

    def __init__(self) -> None:
        self._threads: Dict[str, List[ThreadMessage]] = {}

    async def create_thread(self) -> str:
        thread_ref = f"thread_{uuid.uuid4().hex}"
        self._threads[thread_ref] = []
        return thread_ref

    async def append_user_message(self, thread_ref: str, text: str) -> None:
        self._append(thread_ref, "user", text)

    async def append_assistant_message(self, thread_ref: str, text: str) -> None:
        self._append(thread_ref, "assistant", text)

    async def list_messages(self, thread_ref: str) -> List[ThreadMessage]:
        return [msg.model_copy() for msg in self._thread(thread_ref)]

    def thread_refs(self) -> List[str]:
        return list(self._threads)

    async def aclose(self) -> None:
        return None

    def _thread(self, thread_ref: str) -> List[ThreadMessage]:
        thread = self._threads.get(thread_ref)
        if thread is None:
            raise ThreadNotFound(thread_ref)
        return thread

    def _append(self, thread_ref: str, role: ThreadRole, text: str) -> None:
        self._thread(thread_ref).append(ThreadMessage(role=role, content=text))


class OpenAIThreadsMemory:
    """Memory threads stored with the OpenAI Threads API."""

    page_size = 100

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        key = api_key or runtime_config.get_openai_api_key()
        if not key and client is None:
            raise RuntimeError("OPENAI_API_KEY is required for the OpenAI memory backend")
        self._client = client or httpx.AsyncClient(
            base_url=base_url or runtime_config.get_openai_base_url(),
            headers={
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
                "OpenAI-Beta": "assistants=v2",
            },
            timeout=timeout or runtime_config.get_openai_timeout_seconds(),
        )

    async def create_thread(self) -> str:
        data = await self._request("POST", "/threads", json={})
        thread_ref = data.get("id")
        if not thread_ref:
            raise MemoryProviderError("Thread creation returned no id")
        logger.info("Created memory thread %s", thread_ref)
        return thread_ref

    async def append_user_message(self, thread_ref: str, text: str) -> None:
        await self._append(thread_ref, "user", text)

    async def append_assistant_message(self, thread_ref: str, text: str) -> None:
        await self._append(thread_ref, "assistant", text)

    async def list_messages(self, thread_ref: str) -> List[ThreadMessage]:
        messages: List[ThreadMessage] = []
        params: Dict[str, Any] = {"order": "asc", "limit": self.page_size}
        while True:
            page = await self._request(
                "GET", f"/threads/{thread_ref}/messages", params=params, thread_ref=thread_ref
            )
            for item in page.get("data") or []:
                message = _to_thread_message(item)
                if message is not None:
                    messages.append(message)
            if not page.get("has_more") or not page.get("last_id"):
                return messages
            params = {**params, "after": page["last_id"]}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _append(self, thread_ref: str, role: ThreadRole, text: str) -> None:
        await self._request(
            "POST",
            f"/threads/{thread_ref}/messages",
            json={"role": role, "content": text},
            thread_ref=thread_ref,
        )

    async def _request(
        self,
        method: str,
        path: str,
        thread_ref: Optional[str] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise MemoryProviderError(f"Memory provider request failed: {exc}") from exc
        if resp.status_code == 404 and thread_ref:
            raise ThreadNotFound(thread_ref)
        if resp.status_code >= 400:
            raise MemoryProviderError(
                f"Memory provider returned HTTP {resp.status_code}",
                details={"status_code": resp.status_code},
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise MemoryProviderError("Memory provider returned invalid JSON") from exc


def _to_thread_message(item: Dict[str, Any]) -> Optional[ThreadMessage]:
    role = item.get("role")
    if role not in ("user", "assistant"):
        return None
    content = item.get("content")
    if isinstance(content, str):
        text = content
    else:
        text = "".join(
            (part.get("text") or {}).get("value", "")
            for part in content or []
            if part.get("type") == "text"
        )
    return ThreadMessage(role=role, content=text)


def memory_from_env() -> ConversationMemory:
    backend = runtime_config.get_memory_backend()
    if backend == "openai":
        return OpenAIThreadsMemory()
    if backend in {"memory", "inmemory", "in_memory"}:
        if not runtime_config.is_dev_env():
            logger.warning("In-memory conversation threads are lost on restart (ENV=%s)", runtime_config.get_env())
        return InMemoryConversationMemory()
    raise RuntimeError("MEMORY_BACKEND must be set to 'openai' or 'memory'")
