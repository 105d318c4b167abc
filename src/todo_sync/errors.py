# src/todo_sync/errors.py

"""Exception taxonomy shared by the store, the remote adapters and the console."""

from __future__ import annotations


class TodoSyncError(Exception):
    """Base exception for todo-sync errors."""


class ConfigurationError(TodoSyncError):
    """Raised when settings are invalid or a required value is missing."""


class NotFound(TodoSyncError):
    """Raised when a key is absent from the local task mirror."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No task with key {key!r}")
        self.key = key


class InvalidKeyFormat(TodoSyncError):
    """Raised when the last key cannot be parsed as a decimal integer."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Cannot derive the next key from {key!r}: not a decimal integer")
        self.key = key


class ListNotLoaded(TodoSyncError):
    """Raised when a task is added before the first snapshot of the collection arrived."""

    def __init__(self) -> None:
        super().__init__("Task list is still loading; the next key is not known yet")


class RemoteError(TodoSyncError):
    """Any failure reported by the remote store (subscribe/fetch/write/update/delete)."""

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.status_code = status_code
