from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel

ThreadRole = Literal["user", "assistant"]


class ThreadMessage(BaseModel):
    role: ThreadRole
    content: str

    def as_chat_message(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}
