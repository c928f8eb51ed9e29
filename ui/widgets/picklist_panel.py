# ui/widgets/picklist_panel.py

"""The dual-list picklist panel: available groups on the left, chosen groups on the right."""

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QHBoxLayout, QVBoxLayout, QPushButton, QLabel, QTreeView, QSizePolicy, QHeaderView
)

from core.picklist_engine import PicklistEngine
from ui.models.picklist_models import AvailableGroupsModel, ChosenGroupsModel


class PicklistPanel(QWidget):
    """
    A pure view over a PicklistEngine.

    Check boxes and buttons call into the engine; everything shown is re-read
    from the engine whenever it reports state_changed.
    """
    selection_changed = Signal(list)     # forwarded from the engine

    def __init__(self, engine: PicklistEngine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._applying_expansion = False

        self.available_model = AvailableGroupsModel(engine, self)
        self.chosen_model = ChosenGroupsModel(engine, self)

        # --- Widgets ---
        self.available_view = self._make_tree_view(self.available_model)
        self.chosen_view = self._make_tree_view(self.chosen_model)

        self.move_right_button = QPushButton("▶")
        self.move_right_button.setToolTip("Move checked items to Chosen")
        self.move_left_button = QPushButton("◀")
        self.move_left_button.setToolTip("Move checked items back to Available")
        self.remove_button = QPushButton("✕ Remove")
        self.remove_button.setToolTip("Remove the highlighted chosen item or group")
        self.reset_button = QPushButton("Reset")
        self.reset_button.setToolTip("Clear every selection")

        self.counts_label = QLabel()
        self.status_label = QLabel()
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setStyleSheet("color: gray; font-style: italic;")
        self.status_label.hide()

        # --- Layout ---
        buttons = QVBoxLayout()
        buttons.addStretch()
        buttons.addWidget(self.move_right_button)
        buttons.addWidget(self.move_left_button)
        buttons.addStretch()

        lists = QHBoxLayout()
        lists.addWidget(self.available_view)
        lists.addLayout(buttons)
        lists.addWidget(self.chosen_view)

        footer = QHBoxLayout()
        footer.addWidget(self.counts_label)
        footer.addStretch()
        footer.addWidget(self.remove_button)
        footer.addWidget(self.reset_button)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.addWidget(self.status_label)
        layout.addLayout(lists)
        layout.addLayout(footer)

        # --- Connections ---
        self.move_right_button.clicked.connect(lambda: self.engine.commit_to_chosen())
        self.move_left_button.clicked.connect(lambda: self.engine.commit_to_available())
        self.remove_button.clicked.connect(self._on_remove_clicked)
        self.reset_button.clicked.connect(lambda: self.engine.reset_selections())

        self.available_view.expanded.connect(lambda index: self._on_expansion_changed(self.available_model, index, True))
        self.available_view.collapsed.connect(lambda index: self._on_expansion_changed(self.available_model, index, False))
        self.chosen_view.expanded.connect(lambda index: self._on_expansion_changed(self.chosen_model, index, True))
        self.chosen_view.collapsed.connect(lambda index: self._on_expansion_changed(self.chosen_model, index, False))

        self.engine.selection_changed.connect(self.selection_changed)
        self.engine.state_changed.connect(self.refresh)
        self.refresh()

    def _make_tree_view(self, model) -> QTreeView:
        view = QTreeView()
        view.setModel(model)
        view.setAlternatingRowColors(True)
        view.setSelectionBehavior(QTreeView.SelectionBehavior.SelectRows)
        view.setUniformRowHeights(True)
        view.setRootIsDecorated(True)
        view.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        header = view.header()
        header.setStretchLastSection(False)
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        return view

    # ---------- engine -> view ----------
    def refresh(self):
        """Re-read counts, button states, status text and expansion from the engine."""
        engine = self.engine
        self.move_right_button.setEnabled(engine.can_move_to_chosen)
        self.move_left_button.setEnabled(engine.can_move_to_available)
        self.remove_button.setEnabled(engine.has_selected_items)
        self.counts_label.setText(f"Available: {engine.available_count} | Selected: {engine.selected_count}")

        if engine.error:
            self.status_label.setText(f"Error loading data: {engine.error}")
            self.status_label.setStyleSheet("color: #c0392b;")
            self.status_label.show()
        elif engine.is_loading:
            self.status_label.setText("Loading...")
            self.status_label.setStyleSheet("color: gray; font-style: italic;")
            self.status_label.show()
        else:
            self.status_label.hide()

        self._apply_expansion()

    def _apply_expansion(self):
        self._applying_expansion = True
        try:
            available = {g.group_key: g.expanded for g in self.engine.available_groups}
            chosen = {g.group_key: g.expanded for g in self.engine.chosen_groups}
            for view, model, state in ((self.available_view, self.available_model, available),
                                       (self.chosen_view, self.chosen_model, chosen)):
                for row in range(model.rowCount()):
                    index = model.index(row, 0)
                    view.setExpanded(index, state.get(model.data(index, model.GroupKeyRole), False))
        finally:
            self._applying_expansion = False

    # ---------- view -> engine ----------
    def _on_expansion_changed(self, model, index, expanded: bool):
        if self._applying_expansion:
            return
        node = model.node_from_index(index)
        if node is None or not node.is_group:
            return

        if model is self.available_model:
            group = self.engine.grouping.get_group(node.key)
            if group is not None and group.expanded != expanded:
                self.engine.toggle_group_expanded(node.key)
        else:
            for group in self.engine.chosen_groups:
                if group.group_key == node.key and group.expanded != expanded:
                    self.engine.toggle_chosen_group_expanded(node.key)

    def _on_remove_clicked(self):
        """Remove the highlighted chosen row: a whole group or a single item."""
        index = self.chosen_view.currentIndex()
        node = self.chosen_model.node_from_index(index)
        if node is None:
            return
        if node.is_group:
            print(f"[PICKLIST_PANEL] 🗑️ Removing group '{node.key}'")
            self.engine.remove_group(node.key)
        else:
            self.engine.remove_item(node.key)
