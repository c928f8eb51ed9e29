# core/picklist_engine.py

"""
Selection-state engine behind the grouped dual-list picklist.

Owns the grouping, the selection store, both staging registers and the
chosen-side view. Every mutation runs the rollup before it returns, and every
move/remove/reset reports the ordered selection through ``selection_changed``.
"""

import functools
from typing import Iterable, List, Optional

from PySide6.QtCore import QObject, QRecursiveMutex, Signal

from .grouping import AvailableGroup, GroupingResult, group_records
from .picklist_config import PicklistConfig
from .rollup import ChosenGroup, synchronize
from .selection_store import SelectionStore
from .staging import StagingRegister


def _mutation(default=None):
    """Run an engine operation under the engine lock; failures are kept in last_operation_error."""

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            self._mutex.lock()
            try:
                result = method(self, *args, **kwargs)
                self.last_operation_error = None
                return result
            except Exception as e:
                print(f"[PICKLIST] ❌ {method.__name__} failed: {e}")
                self.last_operation_error = f"{method.__name__} failed: {e}"
                return default
            finally:
                self._mutex.unlock()
        return wrapper

    return decorator


def normalize_selected_records(records) -> List[dict]:
    """Turn caller-supplied ``{id, label}`` records into clean dicts, dropping ones without an id."""
    normalized = []
    seen = set()
    for record in records or []:
        if not hasattr(record, "get"):
            continue
        item_id = record.get("id")
        if item_id is None or item_id == "":
            continue
        item_id = str(item_id)
        if item_id in seen:
            continue
        seen.add(item_id)
        # "name" is what the selection event of older callers carried
        label = record.get("label") or record.get("name") or item_id
        normalized.append({"id": item_id, "label": str(label)})
    return normalized


class PicklistEngine(QObject):
    """
    Grouped dual-list selection engine.

    Signals:
        selection_changed(list): ordered ``{id, label}`` dicts after each move,
            removal or reset. The key is ``label``, not the ``name`` key older
            hosts received; ``set_selected_records`` still accepts ``name``.
        state_changed(): anything a view must re-render changed, including
            staging marks and expand/collapse.
        load_error(str): the data fetch failed.
    """

    selection_changed = Signal(list)
    state_changed = Signal()
    load_error = Signal(str)

    def __init__(self, parent=None, config: Optional[PicklistConfig] = None):
        super().__init__(parent)
        self._mutex = QRecursiveMutex()
        self.config = config or PicklistConfig.from_fields()

        self._grouping = GroupingResult()
        self._store = SelectionStore()
        self._pending_available = StagingRegister("pending_available")
        self._pending_chosen = StagingRegister("pending_chosen")
        self._chosen_groups: List[ChosenGroup] = []
        self._pending_restore_records: List[dict] = []

        self.is_loading = False
        self.is_loaded = False
        self.error: Optional[str] = None  # Fetch failure only
        self.last_operation_error: Optional[str] = None

    # ---------------- data loading ----------------
    @_mutation()
    def set_config(self, config: PicklistConfig):
        """Use ``config`` for the next grouping pass."""
        self.config = config

    @_mutation()
    def begin_loading(self):
        """Mark that a fetch is in flight; the current grouping stays visible."""
        self.is_loading = True
        self.state_changed.emit()

    @_mutation(default=False)
    def load_items(self, records, config: Optional[PicklistConfig] = None) -> bool:
        """Replace the grouping wholesale with a fresh pass over ``records``."""
        if config is not None:
            self.config = config

        self._grouping = group_records(records, self.config)
        self._pending_available.clear()
        self._pending_chosen.clear()
        self.is_loading = False
        self.is_loaded = True
        self.error = None

        print(f"[PICKLIST] 📥 Loaded {self._grouping.item_count} items in {len(self._grouping.groups)} groups")

        if self._pending_restore_records:
            self._restore()
        else:
            self._sync()
        self.state_changed.emit()
        return True

    @_mutation()
    def load_failed(self, error):
        """Enter the error state: no grouping, selection untouched."""
        message = str(error) if error else "Unknown error"
        print(f"[PICKLIST] ❌ Error loading data: {message}")

        self._grouping = GroupingResult()
        self._pending_available.clear()
        self._pending_chosen.clear()
        self._chosen_groups = []
        self.is_loading = False
        self.is_loaded = False
        self.error = message

        self.load_error.emit(message)
        self.state_changed.emit()

    # ---------------- restoration / reset ----------------
    @_mutation()
    def set_selected_records(self, records):
        """
        Pre-select records supplied by the host.

        Applied at once when a grouping is loaded, otherwise kept and applied
        when the next load completes. Ids that match no item are kept as well.
        """
        self._pending_restore_records = normalize_selected_records(records)
        if self.is_loaded and self._pending_restore_records:
            self._restore()
            self.state_changed.emit()

    def _restore(self):
        records = self._pending_restore_records
        print(f"[PICKLIST] 🔄 Restoring {len(records)} selected records")

        self._store.replace(records)
        self._pending_restore_records = []
        self._pending_available.clear()
        self._pending_chosen.clear()
        self._sync()

        unknown = [r["id"] for r in records if r["id"] not in self._grouping.item_index]
        if unknown:
            print(f"[PICKLIST] ℹ️ {len(unknown)} restored ids match no loaded item")

    @_mutation()
    def reset_selections(self):
        """Clear the selection, both registers and any queued restoration, then notify."""
        self._store.clear()
        self._pending_available.clear()
        self._pending_chosen.clear()
        self._pending_restore_records = []
        self._chosen_groups = []
        for group in self._grouping.groups:
            group.all_selected = False
            for item in group.items:
                item.selected = False

        print(f"[PICKLIST] 🗑️ Selections reset")
        self._emit_selection()

    def get_selected_records(self) -> List[dict]:
        self._mutex.lock()
        try:
            return self._store.to_ordered_list()
        finally:
            self._mutex.unlock()

    # ---------------- staging ----------------
    @_mutation(default=False)
    def toggle_available(self, item_id: str) -> bool:
        """Mark or unmark an available item for the next move. Returns True if now marked."""
        if item_id not in self._grouping.item_index:
            return False
        staged = self._pending_available.toggle(item_id)
        self.state_changed.emit()
        return staged

    @_mutation(default=False)
    def toggle_chosen(self, item_id: str) -> bool:
        """Mark or unmark a chosen item for the next move back. Returns True if now marked."""
        if not self._store.contains(item_id):
            return False
        staged = self._pending_chosen.toggle(item_id)
        self.state_changed.emit()
        return staged

    # ---------------- moves ----------------
    @_mutation(default=False)
    def commit_to_chosen(self) -> bool:
        """Move every marked available item into the selection."""
        if self._pending_available.is_empty:
            return False

        staged = self._pending_available.ids()
        added = self._store.add(staged, self._labels_for(staged))
        self._pending_available.clear()
        print(f"[PICKLIST] ➡️ Moved {added} items to chosen")

        self._sync()
        self._emit_selection()
        return True

    @_mutation(default=False)
    def commit_to_available(self) -> bool:
        """Move every marked chosen item back to the available side."""
        if self._pending_chosen.is_empty:
            return False

        staged = self._pending_chosen.ids()
        removed = self._store.remove(staged)
        self._pending_chosen.clear()
        print(f"[PICKLIST] ⬅️ Moved {removed} items back to available")

        self._sync()
        self._emit_selection()
        return True

    @_mutation(default=False)
    def select_group(self, group_key: str, checked: bool) -> bool:
        """Select or deselect a whole group immediately, without staging."""
        group = self._grouping.get_group(group_key)
        if group is None:
            return False

        ids = group.item_ids()
        self._pending_available.discard(ids)
        if checked:
            self._store.add(ids, self._labels_for(ids))
        else:
            self._store.remove(ids)
            self._pending_chosen.discard(ids)

        self._sync()
        self._emit_selection()
        return True

    @_mutation()
    def remove_item(self, item_id: str):
        """Drop one item from the selection immediately."""
        self._store.remove([item_id])
        self._pending_chosen.discard([item_id])
        self._sync()
        self._emit_selection()

    @_mutation(default=False)
    def remove_group(self, group_key: str) -> bool:
        """Drop every item of a group from the selection immediately."""
        group = self._grouping.get_group(group_key)
        if group is None:
            return False

        ids = group.item_ids()
        self._store.remove(ids)
        self._pending_chosen.discard(ids)
        self._sync()
        self._emit_selection()
        return True

    # ---------------- view state ----------------
    @_mutation()
    def toggle_group_expanded(self, group_key: str):
        group = self._grouping.get_group(group_key)
        if group is not None:
            group.expanded = not group.expanded
            self.state_changed.emit()

    @_mutation()
    def toggle_chosen_group_expanded(self, group_key: str):
        for group in self._chosen_groups:
            if group.group_key == group_key:
                group.expanded = not group.expanded
                self.state_changed.emit()
                return

    # ---------------- read surface ----------------
    @property
    def grouping(self) -> GroupingResult:
        return self._grouping

    @property
    def available_groups(self) -> List[AvailableGroup]:
        return list(self._grouping.groups)

    @property
    def chosen_groups(self) -> List[ChosenGroup]:
        return list(self._chosen_groups)

    @property
    def pending_available(self) -> List[str]:
        return self._pending_available.ids()

    @property
    def pending_chosen(self) -> List[str]:
        return self._pending_chosen.ids()

    def is_pending_available(self, item_id: str) -> bool:
        return item_id in self._pending_available

    def is_pending_chosen(self, item_id: str) -> bool:
        return item_id in self._pending_chosen

    def is_selected(self, item_id: str) -> bool:
        return self._store.contains(item_id)

    @property
    def can_move_to_chosen(self) -> bool:
        return not self._pending_available.is_empty

    @property
    def can_move_to_available(self) -> bool:
        return not self._pending_chosen.is_empty

    @property
    def available_count(self) -> int:
        """Loaded items that are not selected."""
        return sum(len(g.items) - g.selected_count() for g in self._grouping.groups)

    @property
    def selected_count(self) -> int:
        return len(self._store)

    @property
    def has_selected_items(self) -> bool:
        return len(self._store) > 0

    @property
    def dropped_count(self) -> int:
        return self._grouping.dropped_count

    # ---------------- internals ----------------
    def _labels_for(self, ids: Iterable[str]) -> dict:
        labels = {}
        for item_id in ids:
            item = self._grouping.item_index.get(item_id)
            if item is not None:
                labels[item_id] = item.label
        return labels

    def _sync(self):
        self._chosen_groups = synchronize(self._grouping, self._store, self._chosen_groups)

    def _emit_selection(self):
        records = self._store.to_ordered_list()
        print(f"[PICKLIST] 📡 Selection changed: {len(records)} selected")
        self.selection_changed.emit(records)
        self.state_changed.emit()
