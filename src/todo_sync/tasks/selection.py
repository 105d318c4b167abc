# src/todo_sync/tasks/selection.py

from __future__ import annotations

from collections.abc import Iterator


class SelectionSet:
    """
    Keys ticked for batch deletion.

    Membership is not checked against the task mirror: a key that disappeared
    after a refresh stays here until clear() and is ignored by delete_many().
    """

    def __init__(self) -> None:
        self._keys: set[str] = set()

    def toggle(self, key: str) -> bool:
        """Flip membership of `key`. Returns True if the key is now selected."""
        if key in self._keys:
            self._keys.discard(key)
            return False
        self._keys.add(key)
        return True

    def clear(self) -> None:
        self._keys.clear()

    def members(self) -> frozenset[str]:
        return frozenset(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._keys))
