"""Uniform result shape returned by every bookmark store operation."""
from dataclasses import dataclass
from typing import Generic, TypeVar

from shared.errors import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Outcome of a store operation.

    On success ``data`` holds the payload (may be None for operations with
    nothing to return). On failure ``error`` is a user-facing message and
    ``kind`` says what went wrong.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "StoreResult[T]":
        """Build a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> "StoreResult[T]":
        """Build a failed result."""
        return cls(success=False, error=error, kind=kind)
