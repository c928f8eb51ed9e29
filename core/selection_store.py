# core/selection_store.py

"""Ordered store of the chosen ids, the single source of truth for the selection."""

from typing import Dict, Iterable, Iterator, List, Mapping, Optional


class SelectionStore:
    """
    Ordered set of selected ids with the label each one is reported under.

    Insertion order of the ids currently present is preserved; it is the
    order of the chosen list handed to callers. Adding a present id and
    removing an absent id are both no-ops.
    """

    def __init__(self):
        self._labels: Dict[str, str] = {}

    def add(self, ids: Iterable[str], labels: Optional[Mapping[str, str]] = None) -> int:
        """Append ids that are not yet selected. Returns how many were added."""
        added = 0
        for item_id in ids:
            if item_id in self._labels:
                continue
            label = labels.get(item_id) if labels else None
            self._labels[item_id] = label if label else item_id
            added += 1
        return added

    def remove(self, ids: Iterable[str]) -> int:
        """Remove ids that are selected. Returns how many were removed."""
        removed = 0
        for item_id in ids:
            if self._labels.pop(item_id, None) is not None:
                removed += 1
        return removed

    def clear(self) -> None:
        self._labels.clear()

    def replace(self, records: Iterable[Mapping[str, str]]) -> None:
        """Make the selection exactly the given ``{id, label}`` records, in order."""
        self._labels = {}
        for record in records:
            item_id = record["id"]
            if item_id not in self._labels:
                self._labels[item_id] = record.get("label") or item_id

    def contains(self, item_id: str) -> bool:
        return item_id in self._labels

    def label_for(self, item_id: str) -> Optional[str]:
        return self._labels.get(item_id)

    def ids(self) -> List[str]:
        return list(self._labels)

    def to_ordered_list(self) -> List[dict]:
        """Selected records in selection order, as fresh ``{id, label}`` dicts."""
        return [{"id": item_id, "label": label} for item_id, label in self._labels.items()]

    def __contains__(self, item_id) -> bool:
        return item_id in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._labels))

    def __len__(self) -> int:
        return len(self._labels)
