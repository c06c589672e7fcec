"""Conversation orchestration: validation -> session registry -> reply generator.

Per session: NotStarted -> Active (start_conversation) -> Ended
(end_conversation or idle sweep). Ended sessions are never resurrected; a
new start always creates a new session.
"""
from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Any, List, Optional

from pitchlab.common.errors import GenerationError, MemoryProviderError, SessionNotFound
from pitchlab.common.outcome import MEMORY_FETCH_DEGRADED, BestEffort, OutcomeWarning
from pitchlab.conversations.models import (
    ConversationView,
    ConversationWarning,
    EndResult,
    InitialTextResult,
    MessageResult,
    StartResult,
)
from pitchlab.memory.models import ThreadMessage
from pitchlab.replies.service import ReplyGenerator
from pitchlab.sessions.service import SessionRegistry
from pitchlab.validation.service import sanitize_input, validate_message, validate_text_input

logger = logging.getLogger(__name__)

LEGACY_SYSTEM_INSTRUCTION = "These are the instructions for the AI."
SESSION_ENDED_MESSAGE = "Session ended successfully"


def _trace_id(prefix: str) -> str:
    suffix = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(5))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def _preview(text: str) -> str:
    return sanitize_input(text)[:50]


def _warnings(items: List[OutcomeWarning]) -> Optional[List[ConversationWarning]]:
    if not items:
        return None
    return [ConversationWarning.from_outcome(item) for item in items]


class ConversationService:
    def __init__(self, registry: SessionRegistry, replies: ReplyGenerator) -> None:
        self.registry = registry
        self.replies = replies

    async def start_conversation(self, initial_text: Any) -> StartResult:
        conv_id = _trace_id("conv")
        persona = validate_text_input(initial_text).raise_for_errors()
        logger.info("startConversation START [%s] persona=%r", conv_id, _preview(persona))

        session = await self.registry.create_session()
        self.registry.set_persona(session.session_id, persona)

        try:
            reply = await self.replies.generate_reply(session.thread_ref, persona)
        except GenerationError as exc:
            # the session already exists, so hand it back with the failure inline
            logger.error("startConversation ERROR [%s]: %s", conv_id, exc.message)
            conversation = await self._conversation_or_empty(session.session_id, conv_id)
            return StartResult(
                session_id=session.session_id,
                conversation=conversation.value,
                error=exc.message,
                warnings=_warnings(conversation.warnings),
            )

        logger.info("startConversation END [%s] session=%s", conv_id, session.session_id)
        return StartResult(
            session_id=session.session_id,
            conversation=await self.registry.get_conversation(session.session_id),
            ai_response=reply.text,
            warnings=_warnings(reply.warnings),
        )

    async def process_message(self, session_id: str, user_message: Any) -> MessageResult:
        msg_id = _trace_id("msg")
        text = validate_message(user_message).raise_for_errors()
        logger.info("processMessage START [%s] session=%s", msg_id, session_id)

        await self.registry.add_message(session_id, "user", text)
        thread_ref = self.registry.get_thread_ref(session_id)
        if thread_ref is None:
            # evicted between the append and this lookup
            raise SessionNotFound(session_id)
        persona = self.registry.get_persona(session_id)

        try:
            reply = await self.replies.generate_reply(thread_ref, persona)
        except GenerationError as exc:
            logger.error("processMessage ERROR [%s]: %s", msg_id, exc.message)
            raise

        logger.info("processMessage END [%s] session=%s", msg_id, session_id)
        return MessageResult(
            conversation=await self.registry.get_conversation(session_id),
            ai_response=reply.text,
            user_message=text,
            warnings=_warnings(reply.warnings),
        )

    async def get_conversation(self, session_id: str) -> ConversationView:
        return ConversationView(conversation=await self.registry.get_conversation(session_id))

    async def process_initial_text(self, text: Any) -> InitialTextResult:
        sanitized = validate_text_input(text).raise_for_errors()
        logger.info("processInitialText text=%r", _preview(sanitized))
        messages = [
            {"role": "system", "content": LEGACY_SYSTEM_INSTRUCTION},
            {"role": "user", "content": sanitized},
        ]
        ai_response = await self.replies.get_ai_reply(messages)
        return InitialTextResult(original_text=sanitized, ai_response=ai_response)

    def end_conversation(self, session_id: str) -> EndResult:
        self.registry.end_session(session_id)
        return EndResult(message=SESSION_ENDED_MESSAGE)

    async def _conversation_or_empty(self, session_id: str, trace_id: str) -> BestEffort[List[ThreadMessage]]:
        try:
            return BestEffort.ok(await self.registry.get_conversation(session_id))
        except MemoryProviderError as exc:
            logger.warning("Conversation fetch failed [%s], returning empty conversation: %s", trace_id, exc.message)
            return BestEffort.degrade([], MEMORY_FETCH_DEGRADED, f"Conversation unavailable: {exc.message}")
