# bhp_core/common/result.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a best-effort side call (audit write, object cleanup, outbound email).

    These calls never raise; failures are logged where they happen and carried in
    `error`. Callers that do not care must say so with `.ignore()` so that an
    unchecked Outcome is easy to spot in review.
    """
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Outcome[T]":
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, error: BaseException) -> "Outcome[T]":
        return cls(value=None, error=error)

    def ignore(self) -> None:
        """Discard the result. The failure was already logged by the producer."""
        return None
