# src/todo_sync/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Priority(IntEnum):
    """
    Task priority as stored remotely.

    Notes:
    - NONE (0) only appears for records written without a selected priority;
      the add/edit dialog never commits it.
    """

    NONE = 0
    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @classmethod
    def from_remote(cls, raw: Any) -> Priority:
        """Parse a stored priority (int or numeric string). Raises ValueError on garbage."""
        if isinstance(raw, bool):
            raise ValueError(f"Invalid priority: {raw!r}")
        try:
            return cls(int(str(raw).strip()))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid priority: {raw!r}") from e


def priority_from_flags(high: bool, medium: bool, low: bool) -> Priority:
    """Map the three priority selectors to a level; high wins over medium over low."""
    if high:
        return Priority.HIGH
    if medium:
        return Priority.MEDIUM
    if low:
        return Priority.LOW
    return Priority.NONE


@dataclass(frozen=True, slots=True)
class TaskRecord:
    description: str
    priority: Priority = Priority.NONE

    def __post_init__(self) -> None:
        if not isinstance(self.description, str):
            raise TypeError("description must be a string")
        if not isinstance(self.priority, Priority):
            # frozen dataclass: coerce through object.__setattr__
            object.__setattr__(self, "priority", Priority(int(self.priority)))

    def to_remote(self) -> dict[str, Any]:
        return {"description": self.description, "priority": int(self.priority)}

    @classmethod
    def from_remote(cls, raw: Any) -> TaskRecord:
        """
        Build a record from a stored child value.

        Expected shape: {"description": str, "priority": int}.
        Raises ValueError when the value is not a task object.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a task object, got {type(raw).__name__}")
        if raw.get("description") is None:
            raise ValueError("Task object has no description")
        return cls(
            description=str(raw["description"]),
            priority=Priority.from_remote(raw.get("priority", 0)),
        )
