"""
Integration tests for the complete picklist workflow.
Fetcher thread -> controller -> engine -> panel, with a fake fetch function.
"""

import json
from unittest.mock import patch

import pytest

from core.picklist_engine import PicklistEngine
from core.record_fetcher import RecordFetcher
from ui.controllers.picklist_controller import PicklistController
from ui.widgets.picklist_panel import PicklistPanel


class TestPicklistWorkflowIntegration:
    """Integration tests for loading, restoring and moving selections."""

    @pytest.fixture
    def records(self, sample_records):
        return list(sample_records)

    @pytest.fixture
    def setup(self, qtbot, records):
        """Engine, fetcher, controller and panel wired like the application does."""
        calls = {"queries": [], "fail_with": None}

        def fetch(query):
            calls["queries"].append(query)
            if calls["fail_with"]:
                raise RuntimeError(calls["fail_with"])
            return records

        engine = PicklistEngine()
        fetcher = RecordFetcher(fetch)
        controller = PicklistController(engine, fetcher)
        panel = PicklistPanel(engine)
        qtbot.addWidget(panel)

        yield engine, fetcher, controller, panel, calls
        fetcher.cleanup()

    def _start_and_wait(self, qtbot, engine, controller, *args, **kwargs):
        with qtbot.waitSignal(controller.fetcher.fetch_complete, timeout=5000, raising=True):
            assert controller.start(*args, **kwargs)

    def test_load_groups_by_configured_field(self, qtbot, setup):
        engine, fetcher, controller, panel, calls = setup

        self._start_and_wait(qtbot, engine, controller, "records.json", {"group_key_field": "Cat"})

        assert calls["queries"] == ["records.json"]
        assert [g.group_key for g in engine.available_groups] == ["X", "Y"]
        assert panel.available_model.rowCount() == 2
        assert panel.status_label.isHidden()

    def test_restored_selection_applies_after_fetch(self, qtbot, setup):
        engine, fetcher, controller, panel, calls = setup
        emitted = []
        panel.selection_changed.connect(emitted.append)

        self._start_and_wait(qtbot, engine, controller, "q", {"group_key_field": "Cat"},
                             records_to_restore=[{"id": "3", "label": "C"}, {"id": "9", "label": "Ghost"}])

        assert engine.get_selected_records() == [{"id": "3", "label": "C"}, {"id": "9", "label": "Ghost"}]
        assert [(g.group_key, g.item_ids()) for g in engine.chosen_groups] == [("Y", ["3"])]
        assert panel.chosen_model.rowCount() == 1
        assert emitted == []

    def test_fetch_error_is_shown(self, qtbot, setup):
        engine, fetcher, controller, panel, calls = setup
        calls["fail_with"] = "INVALID_QUERY"

        with qtbot.waitSignal(engine.load_error, timeout=5000, raising=True) as blocker:
            controller.start("bad query")

        assert blocker.args == ["INVALID_QUERY"]
        assert panel.status_label.text() == "Error loading data: INVALID_QUERY"
        assert engine.available_groups == []

    def test_refresh_keeps_selection(self, qtbot, setup, records):
        engine, fetcher, controller, panel, calls = setup
        self._start_and_wait(qtbot, engine, controller, "q", {"group_key_field": "Cat"})
        engine.select_group("X", True)

        records.append({"id": "4", "Name": "D", "Cat": "X"})
        with qtbot.waitSignal(fetcher.fetch_complete, timeout=5000, raising=True):
            assert controller.refresh()

        assert calls["queries"] == ["q", "q"]
        assert [r["id"] for r in engine.get_selected_records()] == ["1", "2"]
        # The new item joins group X, which is therefore no longer fully selected
        assert engine.grouping.get_group("X").all_selected is False

    def test_start_sets_config_through_engine(self, qtbot, setup):
        engine, fetcher, controller, panel, calls = setup

        with patch.object(engine, "set_config", wraps=engine.set_config) as set_config:
            self._start_and_wait(qtbot, engine, controller, "q", {"group_key_field": "Cat", "display_field": "Name"})

        set_config.assert_called_once()
        assert engine.config.group_key_field == "Cat"
        assert engine.config.display_field == "Name"

    def test_refresh_without_query_does_nothing(self, setup):
        engine, fetcher, controller, panel, calls = setup
        assert controller.refresh() is False
        assert calls["queries"] == []

    def test_full_move_cycle(self, qtbot, setup):
        engine, fetcher, controller, panel, calls = setup
        self._start_and_wait(qtbot, engine, controller, "q", {"group_key_field": "Cat"})

        engine.toggle_available("2")
        engine.toggle_available("3")
        with qtbot.waitSignal(panel.selection_changed, raising=True) as blocker:
            panel.move_right_button.click()
        assert blocker.args == [[{"id": "2", "label": "B"}, {"id": "3", "label": "C"}]]

        engine.toggle_chosen("2")
        with qtbot.waitSignal(panel.selection_changed, raising=True) as blocker:
            panel.move_left_button.click()
        assert blocker.args == [[{"id": "3", "label": "C"}]]
        assert panel.counts_label.text() == "Available: 2 | Selected: 1"


def test_json_file_end_to_end(qtbot, tmp_path, sample_records):
    """The default fetch function reads a JSON file."""
    path = tmp_path / "records.json"
    path.write_text(json.dumps({"records": sample_records}), encoding="utf-8")

    engine = PicklistEngine()
    fetcher = RecordFetcher()
    controller = PicklistController(engine, fetcher)

    with qtbot.waitSignal(fetcher.fetch_complete, timeout=5000, raising=True):
        controller.start(str(path))
    fetcher.cleanup()

    # No group field configured: a single default group
    assert [(g.group_key, g.item_ids()) for g in engine.available_groups] == [("Default Group", ["1", "2", "3"])]
