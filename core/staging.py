# core/staging.py

"""Staging registers: candidates marked for the next bulk move."""

from typing import Iterable, Iterator, List


class StagingRegister:
    """
    Ordered id set that accumulates check-box marks until one explicit commit.

    A register is either empty or populated. A commit reads ``ids`` and clears
    the register once the move has been applied.
    """

    def __init__(self, name: str):
        self.name = name
        self._ids = {}  # dict used as an ordered set

    def toggle(self, item_id: str) -> bool:
        """Flip membership of an id. Returns True if the id is now staged."""
        if item_id in self._ids:
            del self._ids[item_id]
            return False
        self._ids[item_id] = None
        return True

    def discard(self, ids: Iterable[str]) -> None:
        for item_id in ids:
            self._ids.pop(item_id, None)

    def clear(self) -> None:
        self._ids.clear()

    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def __contains__(self, item_id) -> bool:
        return item_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self):
        return f"StagingRegister({self.name!r}, {list(self._ids)!r})"
