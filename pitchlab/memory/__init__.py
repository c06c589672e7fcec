"""Conversational-memory threads (external provider or in-process fake)."""

from pitchlab.memory.models import ThreadMessage
from pitchlab.memory.repository import (
    ConversationMemory,
    InMemoryConversationMemory,
    OpenAIThreadsMemory,
    memory_from_env,
)

__all__ = [
    "ConversationMemory",
    "InMemoryConversationMemory",
    "OpenAIThreadsMemory",
    "ThreadMessage",
    "memory_from_env",
]
