# tests/test_task_models.py

from __future__ import annotations

import dataclasses

import pytest

from todo_sync.tasks.task_models import Priority, TaskRecord, priority_from_flags


@pytest.mark.parametrize(
    ("high", "medium", "low", "expected"),
    [
        (False, False, False, Priority.NONE),
        (True, False, False, Priority.HIGH),
        (False, True, False, Priority.MEDIUM),
        (False, False, True, Priority.LOW),
        (True, True, False, Priority.HIGH),
        (True, False, True, Priority.HIGH),
        (True, True, True, Priority.HIGH),
        (False, True, True, Priority.MEDIUM),
    ],
)
def test_priority_from_flags_precedence(high, medium, low, expected) -> None:
    assert priority_from_flags(high, medium, low) == expected


def test_priority_levels_match_stored_ints() -> None:
    assert [int(p) for p in (Priority.NONE, Priority.HIGH, Priority.MEDIUM, Priority.LOW)] == [0, 1, 2, 3]


def test_record_is_immutable_and_coerces_priority() -> None:
    rec = TaskRecord("Buy milk", 1)  # type: ignore[arg-type]
    assert rec.priority is Priority.HIGH
    with pytest.raises(dataclasses.FrozenInstanceError):
        rec.description = "Buy bread"  # type: ignore[misc]


def test_record_rejects_unknown_priority() -> None:
    with pytest.raises(ValueError):
        TaskRecord("x", 7)  # type: ignore[arg-type]


def test_record_remote_shape() -> None:
    rec = TaskRecord("Buy milk", Priority.LOW)
    assert rec.to_remote() == {"description": "Buy milk", "priority": 3}
    assert TaskRecord.from_remote({"description": "Buy milk", "priority": "3"}) == rec


@pytest.mark.parametrize(
    "raw",
    [None, "text", {"priority": 1}, {"description": "x", "priority": "high"}, {"description": "x", "priority": 9}],
)
def test_record_from_remote_rejects_malformed(raw) -> None:
    with pytest.raises(ValueError):
        TaskRecord.from_remote(raw)
