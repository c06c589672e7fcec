import sys
from pathlib import Path
import os
from typing import Dict, List, Optional

import pytest

# Ensure repo root on sys.path for imports from anywhere in tests tree.
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENV", "dev")
os.environ.setdefault("MEMORY_BACKEND", "memory")

from pitchlab.common.errors import CompletionError  # noqa: E402
from pitchlab.config.runtime_config import SessionSettings  # noqa: E402
from pitchlab.conversations.service import ConversationService  # noqa: E402
from pitchlab.memory.repository import InMemoryConversationMemory  # noqa: E402
from pitchlab.replies.service import ReplyGenerator  # noqa: E402
from pitchlab.sessions.service import SessionRegistry  # noqa: E402


class ScriptedCompletionClient:
    """Completion stub: returns queued replies (or "reply N") and records every request."""

    def __init__(self, replies: Optional[List[Optional[str]]] = None) -> None:
        self.replies = list(replies or [])
        self.calls: List[Dict[str, object]] = []
        self.fail_with: Optional[Exception] = None

    async def complete(self, messages, *, temperature, max_tokens):
        self.calls.append(
            {"messages": [dict(m) for m in messages], "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.fail_with is not None:
            raise self.fail_with
        if self.replies:
            return self.replies.pop(0)
        return f"reply {len(self.calls)}"

    def fail(self, message: str = "rate limited") -> None:
        self.fail_with = CompletionError(message)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def memory():
    return InMemoryConversationMemory()


@pytest.fixture
def completions():
    return ScriptedCompletionClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(memory, clock):
    return SessionRegistry(memory, settings=SessionSettings(idle_ttl_seconds=1800, sweep_interval_seconds=600), clock=clock)


@pytest.fixture
def replies(memory, completions):
    return ReplyGenerator(memory, completions)


@pytest.fixture
def conversation_service(registry, replies):
    return ConversationService(registry, replies)
