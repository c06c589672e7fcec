from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pitchlab.common.outcome import OutcomeWarning
from pitchlab.memory.models import ThreadMessage


class ConversationWarning(BaseModel):
    code: str
    message: str

    @classmethod
    def from_outcome(cls, warning: OutcomeWarning) -> "ConversationWarning":
        return cls(code=warning.code, message=warning.message)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class StartResult(_CamelModel):
    session_id: str
    conversation: List[ThreadMessage] = Field(default_factory=list)
    ai_response: Optional[str] = None
    error: Optional[str] = None
    warnings: Optional[List[ConversationWarning]] = None


class MessageResult(_CamelModel):
    conversation: List[ThreadMessage] = Field(default_factory=list)
    ai_response: str
    user_message: str
    warnings: Optional[List[ConversationWarning]] = None


class ConversationView(_CamelModel):
    conversation: List[ThreadMessage] = Field(default_factory=list)


class InitialTextResult(_CamelModel):
    original_text: str
    ai_response: str


class EndResult(_CamelModel):
    message: str


# --- Request bodies ---

class StartConversationRequest(BaseModel):
    initialText: Optional[Any] = None


class SendMessageRequest(BaseModel):
    message: Optional[Any] = None


class ProcessTextRequest(BaseModel):
    text: Optional[Any] = None
