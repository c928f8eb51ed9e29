"""
Grouping engine for the picklist.
Turns a flat record collection into named, ordered groups of selectable items.
"""

from typing import Dict, List, Optional

from .picklist_config import PicklistConfig, record_id


class Item:
    def __init__(self, item_id: str, label: str, group_key: str):
        self.id = item_id
        self.label = label
        self.group_key = group_key
        self.selected = False  # Derived, maintained by the rollup

    def to_record(self) -> dict:
        return {"id": self.id, "label": self.label}

    def __repr__(self):
        return f"Item({self.id!r}, {self.label!r}, group={self.group_key!r})"


class AvailableGroup:
    def __init__(self, group_key: str):
        self.group_key = group_key
        self.items: List[Item] = []
        self.all_selected = False  # Derived, maintained by the rollup
        self.expanded = False  # View state only

    def add_item(self, item: Item):
        self.items.append(item)

    def item_ids(self) -> List[str]:
        return [item.id for item in self.items]

    def selected_count(self) -> int:
        return sum(1 for item in self.items if item.selected)

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return f"AvailableGroup({self.group_key!r}, {self.item_ids()!r})"


class GroupingResult:
    """Output of one grouping pass: ordered groups plus the lookup indexes built alongside."""

    def __init__(self):
        self.groups: List[AvailableGroup] = []
        self.group_index: Dict[str, AvailableGroup] = {}
        self.id_index: Dict[str, str] = {}  # item id -> group key
        self.item_index: Dict[str, Item] = {}
        self.total_count = 0
        self.dropped_count = 0
        self.duplicate_count = 0

    @property
    def item_count(self) -> int:
        return len(self.item_index)

    def get_group(self, group_key: str) -> Optional[AvailableGroup]:
        return self.group_index.get(group_key)

    def group_key_for(self, item_id: str) -> Optional[str]:
        return self.id_index.get(item_id)


def group_records(records, config: Optional[PicklistConfig] = None) -> GroupingResult:
    """
    Group records in a single pass.

    Groups are ordered by the first record that names them, items keep input
    order. Records that are not mappings, have no id, repeat an earlier id or
    make the extractor fail are dropped and counted.
    """
    config = config or PicklistConfig.from_fields()
    result = GroupingResult()

    if not records or isinstance(records, (str, bytes)) or not hasattr(records, "__iter__"):
        return result

    # dict keeps insertion order, which is the group order
    group_map: Dict[str, AvailableGroup] = {}

    for record in records:
        result.total_count += 1

        if not hasattr(record, "get"):
            result.dropped_count += 1
            continue

        item_id = record_id(record)
        if item_id is None:
            result.dropped_count += 1
            continue

        if item_id in result.item_index:
            result.duplicate_count += 1
            continue

        try:
            group_key, label = config.extract(record, item_id)
        except Exception as e:
            print(f"[GROUPING] ⚠️ Extractor failed for record {item_id}: {e}")
            result.dropped_count += 1
            continue

        group = group_map.get(group_key)
        if group is None:
            group = AvailableGroup(group_key)
            group_map[group_key] = group

        item = Item(item_id, label, group_key)
        group.add_item(item)
        result.item_index[item_id] = item
        result.id_index[item_id] = group_key

    result.groups = list(group_map.values())
    result.group_index = group_map

    print(f"[GROUPING] 📊 Grouped {result.item_count} items into {len(result.groups)} groups "
          f"({result.dropped_count} dropped, {result.duplicate_count} duplicates)")
    return result
