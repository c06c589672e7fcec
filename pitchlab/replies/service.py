"""Buyer reply generation.

The memory thread stores only user/assistant turns, so every call rebuilds
the system instruction (and the session persona) from scratch.

Degrade policy:
- history read failure -> empty history, `memory_fetch_degraded` warning
- assistant append failure -> reply still returned, `persist_append_failed` warning
- completion failure -> GenerationError, no retry
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pitchlab.common.errors import CompletionError, GenerationError
from pitchlab.common.outcome import (
    MEMORY_FETCH_DEGRADED,
    PERSIST_APPEND_FAILED,
    BestEffort,
    OutcomeWarning,
)
from pitchlab.config.runtime_config import GenerationSettings
from pitchlab.llm.client import ChatMessage, CompletionClient
from pitchlab.memory.models import ThreadMessage
from pitchlab.memory.repository import ConversationMemory

logger = logging.getLogger(__name__)

BASE_INSTRUCTION = (
    "You are a potential buyer taking a sales call. Stay in character as the buyer for the "
    "whole conversation and never reveal that you are an AI. Respond the way a real prospect "
    "would: ask questions, raise objections when something is unclear or unconvincing, and "
    "keep each reply short and conversational. If the conversation has not started yet, "
    "open the call as the buyer."
)
PERSONA_MARKER = "IMPORTANT - Your persona and behavior:"


@dataclass
class ReplyOutcome:
    text: str
    warnings: List[OutcomeWarning] = field(default_factory=list)


def build_system_instruction(persona: Optional[str] = None) -> str:
    if persona and persona.strip():
        return f"{BASE_INSTRUCTION}\n\n{PERSONA_MARKER}\n{persona}"
    return BASE_INSTRUCTION


def build_request_messages(history: List[ThreadMessage], persona: Optional[str] = None) -> List[ChatMessage]:
    messages: List[ChatMessage] = [{"role": "system", "content": build_system_instruction(persona)}]
    messages.extend(msg.as_chat_message() for msg in history)
    return messages


class ReplyGenerator:
    def __init__(
        self,
        memory: ConversationMemory,
        completions: CompletionClient,
        settings: Optional[GenerationSettings] = None,
    ) -> None:
        self.memory = memory
        self.completions = completions
        self.settings = settings or GenerationSettings()

    async def generate_reply(self, thread_ref: str, persona: Optional[str] = None) -> ReplyOutcome:
        history = await self._fetch_history(thread_ref)
        messages = build_request_messages(history.value, persona)

        text = await self._complete(messages) or ""

        persisted = await self._persist_reply(thread_ref, text)
        return ReplyOutcome(text=text, warnings=history.warnings + persisted.warnings)

    async def get_ai_reply(self, messages: List[ChatMessage]) -> str:
        """Single-shot completion over caller-supplied messages (session-less flows)."""
        text = await self._complete(messages)
        if not text:
            raise GenerationError("No response from AI")
        return text

    async def _complete(self, messages: List[ChatMessage]) -> Optional[str]:
        try:
            return await self.completions.complete(
                messages,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
            )
        except CompletionError as exc:
            raise GenerationError(exc.message) from exc
        except Exception as exc:
            logger.exception("Completion client raised unexpectedly")
            raise GenerationError(str(exc) or exc.__class__.__name__) from exc

    async def _fetch_history(self, thread_ref: str) -> BestEffort[List[ThreadMessage]]:
        try:
            return BestEffort.ok(await self.memory.list_messages(thread_ref))
        except Exception as exc:
            logger.warning("History fetch failed for thread %s, using empty history: %s", thread_ref, exc)
            return BestEffort.degrade([], MEMORY_FETCH_DEGRADED, f"History unavailable: {exc}")

    async def _persist_reply(self, thread_ref: str, text: str) -> BestEffort[None]:
        try:
            await self.memory.append_assistant_message(thread_ref, text)
            return BestEffort.ok(None)
        except Exception as exc:
            logger.error("Failed to append assistant reply to thread %s: %s", thread_ref, exc)
            return BestEffort.degrade(None, PERSIST_APPEND_FAILED, f"Reply not saved to thread: {exc}")
