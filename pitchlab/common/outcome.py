"""Result type for best-effort steps that may degrade without failing."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

T = TypeVar("T")

MEMORY_FETCH_DEGRADED = "memory_fetch_degraded"
PERSIST_APPEND_FAILED = "persist_append_failed"


@dataclass(frozen=True)
class OutcomeWarning:
    code: str
    message: str


@dataclass
class BestEffort(Generic[T]):
    """A value plus the non-fatal warnings raised while producing it."""

    value: T
    warnings: List[OutcomeWarning] = field(default_factory=list)

    @classmethod
    def ok(cls, value: T) -> "BestEffort[T]":
        return cls(value=value)

    @classmethod
    def degrade(cls, value: T, code: str, message: str) -> "BestEffort[T]":
        return cls(value=value, warnings=[OutcomeWarning(code=code, message=message)])
