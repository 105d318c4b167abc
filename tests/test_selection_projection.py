# tests/test_selection_projection.py

from __future__ import annotations

from todo_sync.tasks.projection import PriorityColor, priority_color, project
from todo_sync.tasks.selection import SelectionSet
from todo_sync.tasks.task_models import Priority, TaskRecord
from todo_sync.tasks.task_store import KeyedTaskStore


def test_toggle_twice_restores_membership() -> None:
    sel = SelectionSet()
    assert sel.toggle("3") is True
    assert "3" in sel
    assert sel.toggle("3") is False
    assert sel.members() == frozenset()

    sel.toggle("1")
    sel.toggle("2")
    sel.toggle("2")
    assert sel.members() == {"1"}
    sel.clear()
    assert not sel


def test_selection_tolerates_unknown_keys() -> None:
    store = KeyedTaskStore([("0", TaskRecord("a", Priority.LOW))])
    sel = SelectionSet()
    sel.toggle("gone")
    rows = project(store, sel)
    assert [r.selected for r in rows] == [False]


def test_priority_colors_are_a_fixed_table() -> None:
    assert priority_color(Priority.HIGH) is PriorityColor.RED
    assert priority_color(Priority.MEDIUM) is PriorityColor.BLUE
    assert priority_color(Priority.LOW) is PriorityColor.GREEN
    assert priority_color(Priority.NONE) is None
    assert priority_color(2) is PriorityColor.BLUE


def test_projection_keeps_store_order() -> None:
    t1 = TaskRecord("first", Priority.LOW)
    t2 = TaskRecord("second", Priority.HIGH)
    store = KeyedTaskStore()
    store.replace_all([("k1", t1), ("k2", t2)])

    rows = project(store)
    assert [(r.key, r.record) for r in rows] == [("k1", t1), ("k2", t2)]
    assert [r.color for r in rows] == [PriorityColor.GREEN, PriorityColor.RED]


def test_projection_marks_selected_rows() -> None:
    store = KeyedTaskStore([("0", TaskRecord("a", Priority.HIGH)), ("1", TaskRecord("b", Priority.LOW))])
    sel = SelectionSet()
    sel.toggle("1")
    assert [r.selected for r in project(store, sel)] == [False, True]
