# src/todo_sync/core/dialog.py

"""
Add/edit task dialog model.

Lifecycle:
  IDLE -> OPEN -> VALIDATING -> CLOSED       (valid input, committed)
                             -> OPEN         (validation errors shown, dialog stays)
  cancel() closes from any state.

Each session carries its own target key, so a late fetch result or a second
dialog can never write into the wrong task.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from ..tasks.task_models import Priority, TaskRecord, priority_from_flags

logger = logging.getLogger(__name__)

TITLE_REQUIRED = "Enter task title"
PRIORITY_REQUIRED = "Choose task priority"


class DialogMode(StrEnum):
    ADD = "add"
    EDIT = "edit"


class DialogPhase(StrEnum):
    IDLE = "idle"
    OPEN = "open"
    VALIDATING = "validating"
    CLOSED = "closed"


@dataclass(slots=True, frozen=True)
class ValidationResult:
    title_error: str | None = None
    priority_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.title_error is None and self.priority_error is None

    def messages(self) -> list[str]:
        return [m for m in (self.title_error, self.priority_error) if m]


class DialogSession:
    def __init__(self, mode: DialogMode, key: str | None = None) -> None:
        if mode is DialogMode.EDIT and not key:
            raise ValueError("An edit dialog needs the key of the task being edited")
        self.mode = mode
        self.key = key
        self.phase = DialogPhase.IDLE

        self.description = ""
        self._checked: dict[Priority, bool] = {
            Priority.HIGH: False,
            Priority.MEDIUM: False,
            Priority.LOW: False,
        }

        self.title_error: str | None = None
        self.priority_error: str | None = None
        self.prefilled = False
        self.committed: TaskRecord | None = None
        self._touched: set[str] = set()

    # ---- state ----

    @property
    def is_open(self) -> bool:
        return self.phase in (DialogPhase.OPEN, DialogPhase.VALIDATING)

    @property
    def priority(self) -> Priority:
        return priority_from_flags(
            self._checked[Priority.HIGH],
            self._checked[Priority.MEDIUM],
            self._checked[Priority.LOW],
        )

    def is_checked(self, priority: Priority) -> bool:
        return self._checked.get(priority, False)

    def _require_open(self) -> None:
        if not self.is_open:
            raise RuntimeError(f"Dialog is not open (phase={self.phase})")

    # ---- transitions ----

    def open(self) -> DialogSession:
        if self.phase is not DialogPhase.IDLE:
            raise RuntimeError(f"Dialog already used (phase={self.phase})")
        self.phase = DialogPhase.OPEN
        logger.debug("Dialog opened mode=%s key=%s", self.mode, self.key)
        return self

    def set_description(self, text: str) -> None:
        self._require_open()
        self.description = text
        self.title_error = None
        self._touched.add("description")

    def set_checked(self, priority: Priority, checked: bool = True) -> None:
        """Tick/untick a priority selector. Ticking one unticks the other two."""
        self._require_open()
        if priority not in self._checked:
            raise ValueError(f"Not a selectable priority: {priority!r}")
        if checked:
            for p in self._checked:
                self._checked[p] = p is priority
            self.priority_error = None
        else:
            self._checked[priority] = False
        self._touched.add("priority")

    def apply_prefill(self, record: TaskRecord | None) -> bool:
        """
        Fill the form from a fetched record.

        Ignored when the dialog is no longer open (the fetch outlived it) or
        the task vanished. Fields the user already changed are left alone.
        """
        if not self.is_open or self.mode is not DialogMode.EDIT:
            logger.debug("Stale prefill for key=%s ignored (phase=%s)", self.key, self.phase)
            return False
        if record is None:
            return False

        if "description" not in self._touched:
            self.description = record.description
        if "priority" not in self._touched:
            for p in self._checked:
                self._checked[p] = p is record.priority
        self.prefilled = True
        return True

    def submit(self) -> ValidationResult:
        self._require_open()
        self.phase = DialogPhase.VALIDATING

        # Both checks always run so both indicators can show at once.
        title_error = TITLE_REQUIRED if not self.description.strip() else None
        ticked = sum(1 for v in self._checked.values() if v)
        priority_error = PRIORITY_REQUIRED if ticked != 1 else None

        result = ValidationResult(title_error=title_error, priority_error=priority_error)
        self.title_error, self.priority_error = title_error, priority_error

        if result.ok:
            self.committed = TaskRecord(description=self.description.strip(), priority=self.priority)
            self.phase = DialogPhase.CLOSED
        else:
            self.phase = DialogPhase.OPEN
        return result

    def cancel(self) -> None:
        self.phase = DialogPhase.CLOSED
