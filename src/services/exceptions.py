"""Shared exceptions for service layer operations."""
from shared.errors import ErrorKind


class StoreError(Exception):
    """
    Base exception for expected service failures.

    Carries the ErrorKind so the store boundary can report it without guessing.
    """

    kind: ErrorKind = ErrorKind.SERVER

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidInputError(StoreError):
    """Raised when input is rejected before any database call."""

    kind = ErrorKind.VALIDATION


class NotFoundError(StoreError):
    """Base for 'does not exist or is not owned by the caller' errors."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(StoreError):
    """Base for uniqueness violations."""

    kind = ErrorKind.CONFLICT
