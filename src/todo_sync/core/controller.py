# src/todo_sync/core/controller.py

"""
Task list controller.

The seam between the presentation layer and the sync model:
- remote notifications rebuild the local mirror and the row projection
- user actions become remote writes/updates/deletes
- local state is only ever replaced by a notification, never patched by an action

Everything here runs on the presentation thread; remote stores hand their
callbacks back through a dispatcher.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import StrEnum

from ..errors import ListNotLoaded, NotFound, RemoteError
from ..tasks.projection import ListRow, project
from ..tasks.selection import SelectionSet
from ..tasks.task_models import Priority, TaskRecord
from ..tasks.task_store import KeyedTaskStore
from .dialog import DialogMode, DialogSession, ValidationResult
from .ports import Entries, RemoteStore, Subscription

logger = logging.getLogger(__name__)

RowsListener = Callable[[Sequence[ListRow]], None]
ErrorListener = Callable[[RemoteError], None]


class ViewState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    OFFLINE = "offline"
    EMPTY = "empty"
    READY = "ready"


class TaskListController:
    def __init__(
        self,
        remote: RemoteStore,
        *,
        store: KeyedTaskStore | None = None,
        selection: SelectionSet | None = None,
        on_rows: RowsListener | None = None,
        on_error: ErrorListener | None = None,
    ) -> None:
        self.remote = remote
        self.store = store if store is not None else KeyedTaskStore()
        self.selection = selection if selection is not None else SelectionSet()
        self.view_state = ViewState.IDLE
        self.last_error: RemoteError | None = None
        self.refresh_count = 0

        self._on_rows = on_rows
        self._on_error = on_error
        self._rows: tuple[ListRow, ...] = ()
        self._subscription: Subscription | None = None

    # ---- lifecycle ----

    def start(self, online: bool = True) -> None:
        """Subscribe to the collection unless the connectivity gate said we are offline."""
        if self._subscription is not None:
            return
        if not online:
            self.view_state = ViewState.OFFLINE
            logger.info("No network connection; task list not loaded.")
            return
        self.view_state = ViewState.LOADING
        self._subscription = self.remote.subscribe_all(self._handle_change, self._handle_error)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    # ---- remote callbacks ----

    def _handle_change(self, entries: Entries) -> None:
        try:
            self.store.replace_all(entries)
        except (ValueError, TypeError) as e:
            self._handle_error(RemoteError(f"Rejected refresh: {e}"))
            return
        self.refresh_count += 1
        self._rows = project(self.store, self.selection)
        self.view_state = ViewState.READY if len(self.store) else ViewState.EMPTY
        logger.debug("Task list refreshed: %d tasks", len(self.store))
        if self._on_rows is not None:
            self._on_rows(self._rows)

    def _handle_error(self, err: RemoteError) -> None:
        self.last_error = err
        logger.error("Failed to read tasks: %s", err)
        if self._on_error is not None:
            self._on_error(err)

    def _report(self, err: RemoteError) -> None:
        self.last_error = err
        logger.error("Remote operation failed: %s", err)
        if self._on_error is not None:
            self._on_error(err)

    # ---- reads ----

    def rows(self) -> tuple[ListRow, ...]:
        return self._rows

    def key_at(self, index: int) -> str:
        return self.store.key_at(index)

    @property
    def loaded(self) -> bool:
        """True once a snapshot has been applied; until then next_key() would guess."""
        return self.refresh_count > 0

    def _require_loaded(self) -> None:
        if not self.loaded:
            raise ListNotLoaded()

    @property
    def can_delete(self) -> bool:
        return bool(self.selection)

    # ---- dialogs ----

    def open_add_dialog(self) -> DialogSession:
        return DialogSession(DialogMode.ADD).open()

    def open_edit_dialog(self, key: str) -> DialogSession:
        """
        Open an edit dialog for `key`, seeded from the local mirror.

        A fresh copy is fetched as well; it overwrites only fields the user has
        not touched yet, and is dropped if the dialog closed first.
        """
        record = self.store.get(key)
        session = DialogSession(DialogMode.EDIT, key=key).open()
        session.apply_prefill(record)
        self.remote.fetch_once(key, session.apply_prefill, self._report)
        return session

    def submit_dialog(self, session: DialogSession) -> ValidationResult:
        if session.mode is DialogMode.ADD:
            # Checked before submit() so the dialog stays open.
            self._require_loaded()
        result = session.submit()
        if not result.ok or session.committed is None:
            return result

        record = session.committed
        if session.mode is DialogMode.ADD:
            self.add_task(record.description, record.priority)
        else:
            self.remote.update(session.key, record.description, record.priority, self._report)
            logger.info("Task %s updated", session.key)
        return result

    def cancel_dialog(self, session: DialogSession) -> None:
        session.cancel()

    # ---- actions ----

    def add_task(self, description: str, priority: Priority) -> str:
        """Write a new task under the next key. Returns the key used."""
        self._require_loaded()
        if not description.strip():
            raise ValueError("description is required")
        key = self.store.next_key()
        self.remote.write(key, TaskRecord(description=description, priority=priority), self._report)
        logger.info("Task %s added (priority=%s)", key, Priority(priority).name)
        return key

    def update_task(self, key: str, description: str, priority: Priority) -> None:
        if key not in self.store:
            raise NotFound(key)
        if not description.strip():
            raise ValueError("description is required")
        self.remote.update(key, description, Priority(priority), self._report)

    def toggle_selection(self, key: str) -> bool:
        selected = self.selection.toggle(key)
        self._rows = project(self.store, self.selection)
        return selected

    def delete_selected(self) -> frozenset[str]:
        """Issue deletes for every ticked key and clear the selection."""
        keys = self.selection.members()
        if not keys:
            return keys
        self.remote.delete_many(sorted(keys), self._report)
        self.selection.clear()
        self._rows = project(self.store, self.selection)
        logger.info("Delete issued for %d task(s)", len(keys))
        return keys
