# --- File: main.py (Bootstrap) ---
import sys
import argparse
from PySide6.QtWidgets import QApplication, QMainWindow

from core.picklist_config import load_picklist_settings
from core.picklist_engine import PicklistEngine
from core.record_fetcher import RecordFetcher
from ui.controllers.picklist_controller import PicklistController
from ui.widgets.picklist_panel import PicklistPanel


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Grouped dual-list picklist")
    parser.add_argument("records", nargs="?", help="JSON file with the records to pick from")
    parser.add_argument("--group-by", dest="group_key_field", help="Record field to group by")
    parser.add_argument("--display", dest="display_field", help="Record field to display")
    parser.add_argument("--settings", help="Settings JSON file (defaults to picklist_settings.json)")
    return parser.parse_args(argv)


def print_selection(records):
    print(f"[MAIN] ✅ Selected ({len(records)}): {[r['label'] for r in records]}")


def main(argv=None):
    """Application entry point."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_picklist_settings(args.settings)
    for key in ("group_key_field", "display_field"):
        if getattr(args, key):
            settings[key] = getattr(args, key)
    query = args.records or settings["query"]

    print("[MAIN] 🚀 Starting application...")
    app = QApplication(sys.argv[:1])

    engine = PicklistEngine()
    fetcher = RecordFetcher()
    controller = PicklistController(engine, fetcher)

    window = QMainWindow()
    window.setWindowTitle("Picklist")
    panel = PicklistPanel(engine, window)
    panel.selection_changed.connect(print_selection)
    window.setCentralWidget(panel)
    window.resize(800, 500)
    window.show()

    if query:
        controller.start(query, settings)
    else:
        print("[MAIN] ℹ️ No records file given, starting empty")

    app.aboutToQuit.connect(fetcher.cleanup)
    print("[MAIN] 🔄 Starting event loop...")
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
