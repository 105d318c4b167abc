# src/todo_sync/tasks/projection.py

"""
Display projection of the task mirror.

Rows keep the mirror's order untouched; the presentation layer decides how to
draw color and the struck-through "ticked for delete" state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .selection import SelectionSet
from .task_models import Priority, TaskRecord
from .task_store import KeyedTaskStore


class PriorityColor(StrEnum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"


_PRIORITY_COLORS: dict[Priority, PriorityColor | None] = {
    Priority.HIGH: PriorityColor.RED,
    Priority.MEDIUM: PriorityColor.BLUE,
    Priority.LOW: PriorityColor.GREEN,
    Priority.NONE: None,
}


def priority_color(priority: Priority | int) -> PriorityColor | None:
    return _PRIORITY_COLORS[Priority(int(priority))]


@dataclass(frozen=True, slots=True)
class ListRow:
    key: str
    record: TaskRecord
    color: PriorityColor | None
    selected: bool = False

    @property
    def description(self) -> str:
        return self.record.description

    @property
    def priority(self) -> Priority:
        return self.record.priority


def project(store: KeyedTaskStore, selection: SelectionSet | None = None) -> tuple[ListRow, ...]:
    return tuple(
        ListRow(
            key=key,
            record=rec,
            color=priority_color(rec.priority),
            selected=selection is not None and key in selection,
        )
        for key, rec in store.items()
    )
