"""
Qt item models projecting the picklist engine onto the available and chosen trees.
The models hold no selection state of their own: check states are read from the
engine on every data() call and check-box edits are forwarded to it.
"""

from typing import Any, List, Optional, Tuple

from PySide6.QtCore import QAbstractItemModel, QModelIndex, Qt

from core.picklist_engine import PicklistEngine


class PicklistNode:
    def __init__(self, key, label="", is_group=False, parent=None):
        self.key = key  # group key for group rows, item id for item rows
        self.label = label
        self.is_group = is_group
        self.parent = parent
        self.children = []

    def add_child(self, child):
        """Add a child node."""
        child.parent = self
        self.children.append(child)

    def row(self):
        """Get the row index of this node in its parent's children list."""
        if self.parent:
            return self.parent.children.index(self)
        return 0

    def child_count(self):
        return len(self.children)

    def child_at(self, index):
        if 0 <= index < len(self.children):
            return self.children[index]
        return None


class PicklistTreeModel(QAbstractItemModel):
    """
    Two-level tree (group -> item) over one side of the picklist.

    Subclasses describe their rows through ``_structure`` and their check
    states through ``_check_state``; the tree is rebuilt only when the row
    structure changes, otherwise the engine's state_changed just repaints.
    """

    IdRole = Qt.ItemDataRole.UserRole + 1
    GroupKeyRole = Qt.ItemDataRole.UserRole + 2
    IsGroupRole = Qt.ItemDataRole.UserRole + 3
    PendingRole = Qt.ItemDataRole.UserRole + 4
    SelectedRole = Qt.ItemDataRole.UserRole + 5

    HEADERS = ("Name", "")

    def __init__(self, engine: PicklistEngine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.root_node = PicklistNode(None, is_group=True)  # Invisible root
        self._structure_key: Tuple = ()
        self.engine.state_changed.connect(self.refresh)
        self.refresh()

    # ---------- structure ----------
    def _structure(self) -> List[Tuple[str, List[Tuple[str, str]]]]:
        """Return ``[(group_key, [(item_id, label), ...]), ...]`` for this side."""
        raise NotImplementedError

    def refresh(self):
        structure = self._structure()
        structure_key = tuple((key, tuple(items)) for key, items in structure)

        if structure_key == self._structure_key:
            self._emit_all_changed()
            return

        self.beginResetModel()
        self.root_node = PicklistNode(None, is_group=True)
        for group_key, items in structure:
            group_node = PicklistNode(group_key, group_key, True)
            self.root_node.add_child(group_node)
            for item_id, label in items:
                group_node.add_child(PicklistNode(item_id, label))
        self._structure_key = structure_key
        self.endResetModel()

    def _emit_all_changed(self):
        group_count = self.root_node.child_count()
        if group_count == 0:
            return
        last_column = self.columnCount() - 1
        self.dataChanged.emit(self.index(0, 0), self.index(group_count - 1, last_column))
        for row, group_node in enumerate(self.root_node.children):
            if group_node.children:
                parent_index = self.index(row, 0)
                self.dataChanged.emit(self.index(0, 0, parent_index),
                                      self.index(len(group_node.children) - 1, last_column, parent_index))

    def node_from_index(self, index: QModelIndex) -> Optional[PicklistNode]:
        if not index.isValid():
            return None
        return index.internalPointer()

    def group_key_of(self, node: PicklistNode) -> Optional[str]:
        if node is None:
            return None
        return node.key if node.is_group else node.parent.key

    # ---------- QAbstractItemModel interface ----------
    def index(self, row: int, column: int, parent: QModelIndex = QModelIndex()) -> QModelIndex:
        if not self.hasIndex(row, column, parent):
            return QModelIndex()

        parent_node = parent.internalPointer() if parent.isValid() else self.root_node
        child_node = parent_node.child_at(row)
        if child_node:
            return self.createIndex(row, column, child_node)
        return QModelIndex()

    def parent(self, index: QModelIndex) -> QModelIndex:
        if not index.isValid():
            return QModelIndex()

        parent_node = index.internalPointer().parent
        if parent_node == self.root_node or parent_node is None:
            return QModelIndex()
        return self.createIndex(parent_node.row(), 0, parent_node)

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.column() > 0:
            return 0
        parent_node = parent.internalPointer() if parent.isValid() else self.root_node
        return parent_node.child_count()

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return 2  # Name, Count

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self.HEADERS):
                return self.HEADERS[section]
        return None

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        node = self.node_from_index(index)
        if node is None:
            return None

        if role == Qt.ItemDataRole.DisplayRole:
            if index.column() == 0:
                return node.label
            return self._count_text(node)
        elif role == Qt.ItemDataRole.CheckStateRole and index.column() == 0:
            return self._check_state(node)
        elif role == self.IdRole:
            return None if node.is_group else node.key
        elif role == self.GroupKeyRole:
            return self.group_key_of(node)
        elif role == self.IsGroupRole:
            return node.is_group
        elif role == self.PendingRole:
            return self._is_pending(node)
        elif role == self.SelectedRole:
            return False if node.is_group else self.engine.is_selected(node.key)
        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        flags = Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable
        if index.column() == 0 and self._is_checkable(index.internalPointer()):
            flags |= Qt.ItemFlag.ItemIsUserCheckable
        return flags

    # ---------- per-side behaviour ----------
    def _check_state(self, node: PicklistNode) -> Qt.CheckState:
        raise NotImplementedError

    def _is_pending(self, node: PicklistNode) -> bool:
        return False

    def _is_checkable(self, node: PicklistNode) -> bool:
        return True

    def _count_text(self, node: PicklistNode) -> str:
        return f"{node.child_count()}" if node.is_group else ""

    @staticmethod
    def _to_check_state(value) -> Qt.CheckState:
        if isinstance(value, int):
            return Qt.CheckState(value)
        return value


class AvailableGroupsModel(PicklistTreeModel):
    """
    Available side. Group check boxes select/deselect the whole group at once;
    item check boxes mark items for the next move to the chosen side.
    """

    HEADERS = ("Available", "Selected")

    def _structure(self):
        return [
            (group.group_key, [(item.id, item.label) for item in group.items])
            for group in self.engine.available_groups
        ]

    def _group(self, group_key):
        return self.engine.grouping.get_group(group_key)

    def _check_state(self, node):
        if node.is_group:
            group = self._group(node.key)
            if group is None:
                return Qt.CheckState.Unchecked
            if group.all_selected:
                return Qt.CheckState.Checked
            if group.selected_count() > 0:
                return Qt.CheckState.PartiallyChecked
            return Qt.CheckState.Unchecked

        if self.engine.is_selected(node.key) or self.engine.is_pending_available(node.key):
            return Qt.CheckState.Checked
        return Qt.CheckState.Unchecked

    def _is_pending(self, node):
        return not node.is_group and self.engine.is_pending_available(node.key)

    def _is_checkable(self, node):
        # Items already on the chosen side are moved back from there
        return node.is_group or not self.engine.is_selected(node.key)

    def _count_text(self, node):
        if not node.is_group:
            return ""
        group = self._group(node.key)
        if group is None:
            return ""
        return f"{group.selected_count()}/{len(group)}"

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.ItemDataRole.EditRole) -> bool:
        node = self.node_from_index(index)
        if node is None or role != Qt.ItemDataRole.CheckStateRole:
            return False

        check_state = self._to_check_state(value)
        if node.is_group:
            return self.engine.select_group(node.key, check_state == Qt.CheckState.Checked)

        if self.engine.is_selected(node.key):
            return False
        wants_pending = check_state == Qt.CheckState.Checked
        if self.engine.is_pending_available(node.key) != wants_pending:
            self.engine.toggle_available(node.key)
        return True


class ChosenGroupsModel(PicklistTreeModel):
    """
    Chosen side, grouped by group key. Item check boxes mark items for the
    next move back to the available side.
    """

    HEADERS = ("Chosen", "")

    def _structure(self):
        return [
            (group.group_key, [(item["id"], item["label"]) for item in group.items])
            for group in self.engine.chosen_groups
        ]

    def _check_state(self, node):
        if node.is_group:
            pending = sum(1 for child in node.children if self.engine.is_pending_chosen(child.key))
            if pending == 0:
                return Qt.CheckState.Unchecked
            if pending == node.child_count():
                return Qt.CheckState.Checked
            return Qt.CheckState.PartiallyChecked
        if self.engine.is_pending_chosen(node.key):
            return Qt.CheckState.Checked
        return Qt.CheckState.Unchecked

    def _is_pending(self, node):
        return not node.is_group and self.engine.is_pending_chosen(node.key)

    def _is_checkable(self, node):
        return not node.is_group

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.ItemDataRole.EditRole) -> bool:
        node = self.node_from_index(index)
        if node is None or node.is_group or role != Qt.ItemDataRole.CheckStateRole:
            return False

        wants_pending = self._to_check_state(value) == Qt.CheckState.Checked
        if self.engine.is_pending_chosen(node.key) != wants_pending:
            self.engine.toggle_chosen(node.key)
        return True
