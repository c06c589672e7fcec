"""Error taxonomy shared by every pitchlab engine.

Every failure here is scoped to a single request. The HTTP layer maps each
class to a status code through `code` / `http_status`
(see `pitchlab.common.error_envelope.register_error_handlers`).
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class PitchLabError(Exception):
    code = "pitchlab.error"
    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputValidationError(PitchLabError):
    code = "validation.error"
    http_status = 400

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            f"Validation failed: {', '.join(self.errors)}",
            details={"errors": self.errors},
        )


class SessionNotFound(PitchLabError):
    code = "session.not_found"
    http_status = 404

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session not found", details={"session_id": session_id})


class PersonaAlreadyBound(PitchLabError):
    code = "session.persona_bound"
    http_status = 409

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Persona already set for session", details={"session_id": session_id})


class GenerationError(PitchLabError):
    code = "generation.failed"
    http_status = 502

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"AI response failed: {reason}")


class MemoryProviderError(PitchLabError):
    code = "memory.provider_error"
    http_status = 502


class ThreadNotFound(MemoryProviderError):
    code = "memory.thread_not_found"

    def __init__(self, thread_ref: str) -> None:
        self.thread_ref = thread_ref
        super().__init__(f"Thread not found: {thread_ref}", details={"thread_ref": thread_ref})


class CompletionError(PitchLabError):
    code = "completion.failed"
    http_status = 502
