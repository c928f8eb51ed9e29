"""
Rollup synchronizer.
Recomputes the derived selection flags on the available side and rebuilds the
chosen-side grouped view from the selection store.
"""

from typing import Dict, List, Optional

from .grouping import AvailableGroup, GroupingResult
from .selection_store import SelectionStore


class ChosenGroup:
    def __init__(self, group_key: str, expanded: bool = True):
        self.group_key = group_key
        self.items: List[dict] = []  # {id, label} in selection order
        self.expanded = expanded  # View state only

    def item_ids(self) -> List[str]:
        return [item["id"] for item in self.items]

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return f"ChosenGroup({self.group_key!r}, {self.item_ids()!r})"


def calculate_all_selected(group: AvailableGroup) -> bool:
    """A group counts as fully selected only when it has items and every one is selected."""
    return bool(group.items) and all(item.selected for item in group.items)


def sync_available_groups(groups: List[AvailableGroup], store: SelectionStore) -> None:
    """Refresh ``Item.selected`` and ``AvailableGroup.all_selected`` from the store."""
    for group in groups:
        for item in group.items:
            item.selected = store.contains(item.id)
        group.all_selected = calculate_all_selected(group)


def build_chosen_groups(grouping: GroupingResult, store: SelectionStore,
                        previous: Optional[List[ChosenGroup]] = None) -> List[ChosenGroup]:
    """
    Partition the selection by group key through the grouping's item index.

    Ids without a known group are left out. Chosen groups follow the order of
    the available groups; items inside a group follow selection order. A group
    keeps its expanded flag from ``previous`` while it stays non-empty.
    """
    expanded_state: Dict[str, bool] = {g.group_key: g.expanded for g in previous or []}
    buckets: Dict[str, ChosenGroup] = {}

    for item_id in store.ids():
        item = grouping.item_index.get(item_id)
        if item is None:
            continue
        bucket = buckets.get(item.group_key)
        if bucket is None:
            bucket = ChosenGroup(item.group_key, expanded_state.get(item.group_key, True))
            buckets[item.group_key] = bucket
        bucket.items.append(item.to_record())

    return [buckets[group.group_key] for group in grouping.groups if group.group_key in buckets]


def synchronize(grouping: GroupingResult, store: SelectionStore,
                previous: Optional[List[ChosenGroup]] = None) -> List[ChosenGroup]:
    """Run both halves of the rollup and return the new chosen groups."""
    sync_available_groups(grouping.groups, store)
    return build_chosen_groups(grouping, store, previous)
