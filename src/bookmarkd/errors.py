"""Exception types raised by the bookmark store."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class StoreError(Exception):
    """Base class for store failures."""


class ParseError(StoreError, ValueError):
    """Malformed JSON, timestamp, or record shape."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        self.reason = message
        if field:
            message = f"{field}: {message}"
        super().__init__(message)


class StoreIOError(StoreError, OSError):
    """The backing file could not be stat'ed, read, or written."""

    def __init__(self, path: Path, operation: str, cause: OSError) -> None:
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(f"failed to {operation} {path}: {cause.strerror or cause}")

    def __str__(self) -> str:
        return str(self.args[0])


class StoreBusyError(StoreError):
    """The store lock was not acquired within the configured timeout."""
