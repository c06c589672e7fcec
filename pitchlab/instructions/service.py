"""First-generation instruction flow (no sessions, no memory thread)."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Union

from pitchlab.common.errors import InputValidationError
from pitchlab.replies.service import ReplyGenerator

logger = logging.getLogger(__name__)

GENERIC_SYSTEM_INSTRUCTION = "These are the instructions for the AI."
ROLEPLAY_SYSTEM_INSTRUCTION = "You are a helpful AI roleplaying as a buyer."
_ALLOWED_ROLES = {"system", "user", "assistant"}

InstructionInput = Union[str, List[Dict[str, Any]]]


def _coerce_messages(text: InstructionInput) -> List[Dict[str, str]]:
    if isinstance(text, str):
        if not text.strip():
            raise InputValidationError(["Text required"])
        return [
            {"role": "system", "content": GENERIC_SYSTEM_INSTRUCTION},
            {"role": "user", "content": text},
        ]
    if isinstance(text, list) and text:
        messages: List[Dict[str, str]] = []
        errors: List[str] = []
        for idx, item in enumerate(text):
            role = item.get("role") if isinstance(item, dict) else None
            content = item.get("content") if isinstance(item, dict) else None
            if role not in _ALLOWED_ROLES or not isinstance(content, str):
                errors.append(f"Message {idx} must have a role in {sorted(_ALLOWED_ROLES)} and string content")
                continue
            messages.append({"role": role, "content": content})
        if errors:
            raise InputValidationError(errors)
        return messages
    raise InputValidationError(["Text required"])


class InstructionService:
    def __init__(self, replies: ReplyGenerator) -> None:
        self.replies = replies

    async def send_to_model(self, text: InstructionInput) -> str:
        """Accept either raw text or a full role/content message array."""
        messages = _coerce_messages(text)
        logger.info("Sending %d instruction message(s) to the model", len(messages))
        return await self.replies.get_ai_reply(messages)

    async def post_instruction(self, instruction: str) -> str:
        """Send a full instruction set and return the buyer's opening line."""
        if not isinstance(instruction, str) or not instruction.strip():
            raise InputValidationError(["Instruction required"])
        messages = [
            {"role": "system", "content": ROLEPLAY_SYSTEM_INSTRUCTION},
            {"role": "user", "content": instruction},
        ]
        return await self.replies.get_ai_reply(messages)
