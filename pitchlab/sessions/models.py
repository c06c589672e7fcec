from __future__ import annotations

import secrets
import string
import time
from typing import List, Optional

from pydantic import BaseModel, Field

from pitchlab.memory.models import ThreadMessage

_BASE36 = string.digits + string.ascii_lowercase


def new_session_id(now: Optional[float] = None) -> str:
    millis = int((now if now is not None else time.time()) * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"session_{millis}_{suffix}"


class Session(BaseModel):
    session_id: str = Field(frozen=True)
    thread_ref: str = Field(frozen=True)
    persona: Optional[str] = None
    created_at: float
    last_activity_at: float

    def touch(self, now: float) -> None:
        self.last_activity_at = now

    def idle_for(self, now: float) -> float:
        return now - self.last_activity_at


class CreatedSession(BaseModel):
    session_id: str
    thread_ref: str
    conversation: List[ThreadMessage] = Field(default_factory=list)
