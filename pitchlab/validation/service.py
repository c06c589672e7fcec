"""Input checks for persona text and chat messages.

Pure functions: no I/O, no side effects. Every applicable error is collected
so callers can report all reasons at once.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List

from pitchlab.common.errors import InputValidationError

TEXT_MIN_LENGTH = 10
TEXT_MAX_LENGTH = 5000
MESSAGE_MAX_LENGTH = 1000

_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED_CHARS = re.compile(r"[^\w\s.,!?;:()\-'\"]")


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    errors: List[str] = field(default_factory=list)
    sanitized: str = ""

    def raise_for_errors(self) -> str:
        """Return the sanitized text, or raise with every collected reason."""
        if not self.ok:
            raise InputValidationError(self.errors)
        return self.sanitized


def validate_text_input(text: Any) -> ValidationResult:
    if not text or not isinstance(text, str):
        return ValidationResult(ok=False, errors=["Text input is required"])

    trimmed = text.strip()
    errors: List[str] = []
    if len(trimmed) == 0:
        errors.append("Text input cannot be empty")
    if len(trimmed) > TEXT_MAX_LENGTH:
        errors.append(f"Text input is too long (maximum {TEXT_MAX_LENGTH} characters)")
    if len(trimmed) < TEXT_MIN_LENGTH:
        errors.append(f"Text input is too short (minimum {TEXT_MIN_LENGTH} characters)")
    return ValidationResult(ok=not errors, errors=errors, sanitized=trimmed)


def validate_message(message: Any) -> ValidationResult:
    if not message or not isinstance(message, str):
        return ValidationResult(ok=False, errors=["Message is required"])

    trimmed = message.strip()
    errors: List[str] = []
    if len(trimmed) == 0:
        errors.append("Message cannot be empty")
    if len(trimmed) > MESSAGE_MAX_LENGTH:
        errors.append(f"Message is too long (maximum {MESSAGE_MAX_LENGTH} characters)")
    return ValidationResult(ok=not errors, errors=errors, sanitized=trimmed)


def sanitize_input(value: Any) -> str:
    """Collapse whitespace, drop non-punctuation symbols, cap at TEXT_MAX_LENGTH."""
    if not isinstance(value, str):
        return ""
    cleaned = _WHITESPACE_RUN.sub(" ", value.strip())
    cleaned = _DISALLOWED_CHARS.sub("", cleaned)
    return cleaned[:TEXT_MAX_LENGTH]
