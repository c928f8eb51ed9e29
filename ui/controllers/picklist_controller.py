from PySide6.QtCore import QObject, Slot

from core.picklist_config import PicklistConfig, ensure_complete_picklist_settings
from core.picklist_engine import PicklistEngine
from core.record_fetcher import RecordFetcher


class PicklistController(QObject):
    """Wires the record fetcher into the picklist engine."""

    def __init__(self, engine: PicklistEngine, fetcher: RecordFetcher, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.fetcher = fetcher
        self.current_settings = ensure_complete_picklist_settings(None)

        self.fetcher.fetch_started.connect(self.on_fetch_started)
        self.fetcher.fetch_complete.connect(self.on_fetch_complete)
        self.fetcher.fetch_error.connect(self.on_fetch_error)

    # ---------------- public API ----------------
    def start(self, query, settings=None, records_to_restore=None) -> bool:
        settings = dict(settings or {})
        settings["query"] = query
        self.current_settings = ensure_complete_picklist_settings(settings)
        print(f"[PICKLIST_CTRL] 🚀 Starting load for: {query!r}")
        print(f"[PICKLIST_CTRL] ⚙️ Settings: {self.current_settings}")

        self.engine.set_config(PicklistConfig.from_settings(self.current_settings))

        if records_to_restore:
            print(f"[PICKLIST_CTRL] 🔄 Restoring {len(records_to_restore)} selected records after load")
            self.engine.set_selected_records(records_to_restore)

        success = self.fetcher.start_fetch(self.current_settings["query"])
        if not success:
            print(f"[PICKLIST_CTRL] ❌ Failed to start fetch")
        return success

    @Slot()
    def refresh(self) -> bool:
        """Fetch again with the current settings; the selection carries over to the new data."""
        if not self.current_settings["query"]:
            return False
        print(f"[PICKLIST_CTRL] 🔄 Refreshing picklist data...")
        return self.start(self.current_settings["query"], self.current_settings)

    # ---------------- fetcher callbacks ----------------
    @Slot()
    def on_fetch_started(self):
        self.engine.begin_loading()

    @Slot(list)
    def on_fetch_complete(self, records):
        print(f"[PICKLIST_CTRL] 📥 Received {len(records)} records")
        self.engine.load_items(records)

    @Slot(str)
    def on_fetch_error(self, error):
        print(f"[PICKLIST_CTRL] ❌ Fetch error: {error}")
        self.engine.load_failed(error)
