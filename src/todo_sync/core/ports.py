# src/todo_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The controller depends on Protocols instead of concrete remote stores.
This keeps the backend (in-memory, local JSON, Firebase) swappable and makes testing easier.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from ..errors import RemoteError
from ..tasks.task_models import Priority, TaskRecord

Key = str
Entries = Sequence[tuple[Key, TaskRecord]]

ChangeHandler = Callable[[Entries], None]
ErrorHandler = Callable[[RemoteError], None]
FetchHandler = Callable[[TaskRecord | None], None]

# How a remote store hands a callback back to the control thread.
# The console passes queue.put; tests and the in-memory store run callbacks inline.
Dispatch = Callable[[Callable[[], None]], None]


def immediate_dispatch(fn: Callable[[], None]) -> None:
    fn()


class Subscription(Protocol):
    """Handle for a persistent collection listener."""

    @property
    def active(self) -> bool: ...

    def unsubscribe(self) -> None: ...


class RemoteStore(Protocol):
    """
    Remote task collection.

    All mutating calls are fire-and-forget: they return before the remote side
    acknowledges, and failures are reported through `on_error`.
    """

    def subscribe_all(self, on_change: ChangeHandler, on_error: ErrorHandler) -> Subscription: ...

    def fetch_once(self, key: Key, on_result: FetchHandler, on_error: ErrorHandler) -> None: ...

    def write(self, key: Key, record: TaskRecord, on_error: ErrorHandler | None = None) -> None: ...

    def update(
        self,
        key: Key,
        description: str,
        priority: Priority,
        on_error: ErrorHandler | None = None,
    ) -> None: ...

    def delete_many(self, keys: Iterable[Key], on_error: ErrorHandler | None = None) -> None: ...

    def close(self) -> None: ...


class ConnectivityProbe(Protocol):
    def is_reachable(self) -> bool: ...
