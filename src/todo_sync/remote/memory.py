# src/todo_sync/remote/memory.py

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..core.ports import (
    ChangeHandler,
    Dispatch,
    ErrorHandler,
    FetchHandler,
    immediate_dispatch,
)
from ..errors import RemoteError
from ..tasks.task_models import Priority, TaskRecord
from .snapshot import as_children, decode_entries

logger = logging.getLogger(__name__)


class _Listener:
    __slots__ = ("_owner", "on_change", "on_error", "_active")

    def __init__(self, owner: InMemoryRemoteStore, on_change: ChangeHandler, on_error: ErrorHandler) -> None:
        self._owner = owner
        self.on_change = on_change
        self.on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._owner._drop_listener(self)


class InMemoryRemoteStore:
    """
    Process-local task collection with the same contract as the real remote.

    Behavior:
    - every mutation pushes the full collection to all listeners (self-notification included)
    - a new listener gets the current contents right away
    - callbacks go through `dispatch`, inline by default

    Used by tests and for offline demo runs.
    """

    def __init__(self, initial: Any = None, *, dispatch: Dispatch = immediate_dispatch) -> None:
        self._dispatch = dispatch
        self._lock = threading.RLock()
        self._children: dict[str, Any] = copy.deepcopy(as_children(initial))
        self._listeners: list[_Listener] = []

    # ---- low-level helpers (overridable) ----

    def _put(self, key: str, value: dict[str, Any]) -> None:
        self._children[key] = dict(value)

    def _patch(self, key: str, fields: dict[str, Any]) -> None:
        current = self._children.get(key)
        merged = dict(current) if isinstance(current, dict) else {}
        merged.update(fields)
        self._children[key] = merged

    def _remove(self, key: str) -> bool:
        return self._children.pop(key, None) is not None

    def _persist(self) -> None:
        """Hook for durable subclasses; called after each successful mutation."""
        return

    def _report(self, on_error: ErrorHandler | None, err: RemoteError) -> None:
        if on_error is None:
            logger.error("Remote operation failed: %s", err)
            return
        self._dispatch(lambda: on_error(err))

    def _drop_listener(self, listener: _Listener) -> None:
        with self._lock:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

    def _notify(self) -> None:
        entries = self.snapshot()
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            self._dispatch(lambda listener=listener: listener.active and listener.on_change(entries))

    def _changed(self) -> None:
        self._persist()
        self._notify()

    # ---- public API ----

    def snapshot(self) -> list[tuple[str, TaskRecord]]:
        with self._lock:
            return decode_entries(self._children)

    def subscribe_all(self, on_change: ChangeHandler, on_error: ErrorHandler) -> _Listener:
        listener = _Listener(self, on_change, on_error)
        with self._lock:
            self._listeners.append(listener)
        entries = self.snapshot()
        self._dispatch(lambda: listener.active and on_change(entries))
        logger.debug("Listener subscribed (total=%d)", len(self._listeners))
        return listener

    def fetch_once(self, key: str, on_result: FetchHandler, on_error: ErrorHandler) -> None:
        with self._lock:
            raw = copy.deepcopy(self._children.get(key))
        if raw is None:
            self._dispatch(lambda: on_result(None))
            return
        try:
            record = TaskRecord.from_remote(raw)
        except ValueError as e:
            err = RemoteError(f"Malformed task at {key!r}: {e}", key=key)
            self._dispatch(lambda: on_error(err))
            return
        self._dispatch(lambda: on_result(record))

    def write(self, key: str, record: TaskRecord, on_error: ErrorHandler | None = None) -> None:
        try:
            with self._lock:
                self._put(key, record.to_remote())
        except RemoteError as e:
            self._report(on_error, e)
            return
        self._changed()

    def update(
        self,
        key: str,
        description: str,
        priority: Priority,
        on_error: ErrorHandler | None = None,
    ) -> None:
        try:
            with self._lock:
                self._patch(key, {"description": description, "priority": int(priority)})
        except RemoteError as e:
            self._report(on_error, e)
            return
        self._changed()

    def delete_many(self, keys: Iterable[str], on_error: ErrorHandler | None = None) -> None:
        # Each delete stands alone: a failure is reported and the rest still run.
        for key in list(keys):
            try:
                with self._lock:
                    removed = self._remove(key)
            except RemoteError as e:
                self._report(on_error, e)
                continue
            if removed:
                self._changed()
            else:
                logger.debug("Delete of missing key %r ignored", key)

    def close(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener.unsubscribe()


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text("utf-8"))


def _atomic_write_json(path: Path, data: Any) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
    os.replace(tmp, path)


class LocalJsonRemoteStore(InMemoryRemoteStore):
    """
    In-memory store persisted to a JSON file (one object: key -> task).

    Every successful mutation rewrites the file atomically (tmp + os.replace).
    """

    def __init__(self, path: str | Path, *, dispatch: Dispatch = immediate_dispatch) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        initial: Any = None
        if self._path.exists():
            try:
                initial = _load_json(self._path)
                as_children(initial)
            except (OSError, ValueError) as e:
                raise RemoteError(f"Cannot read local task store {self._path}: {e}") from e

        super().__init__(initial, dispatch=dispatch)
        logger.info("LocalJsonRemoteStore ready path=%s total=%d", self._path, len(self._children))

    @property
    def path(self) -> Path:
        return self._path

    def _persist(self) -> None:
        with self._lock:
            data = copy.deepcopy(self._children)
        try:
            _atomic_write_json(self._path, data)
        except OSError:
            logger.exception("Failed to save local task store to %s", self._path)
