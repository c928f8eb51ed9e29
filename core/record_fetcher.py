"""
Record fetcher: runs the data fetch off the UI thread and reports records or an error.
The picklist engine never fetches by itself; this is the collaborator that feeds it.
"""

import json
import time
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot


def json_file_fetch(path: str) -> List[dict]:
    """Fetch function that reads records from a JSON file.

    Accepts either a top-level array or an object with a ``records`` array.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("records")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records in '{path}'")
    return data


class FetchWorkerThread(QThread):
    """QThread worker that runs one fetch and hands the outcome back through signals."""

    # generation, records
    fetch_succeeded = Signal(int, list)
    # generation, error message
    fetch_failed = Signal(int, str)

    def __init__(self, fetch_fn: Callable[[str], list], query: str, generation: int, parent=None):
        super().__init__(parent)
        self.fetch_fn = fetch_fn
        self.query = query
        self.generation = generation

    def run(self):
        start_time = time.time()
        try:
            records = self.fetch_fn(self.query)
            if records is None:
                records = []
            if not isinstance(records, (list, tuple)):
                raise TypeError(f"fetch returned {type(records).__name__}, expected a list")
            fetch_time = (time.time() - start_time) * 1000
            print(f"[FETCHER] ✅ Fetched {len(records)} records in {fetch_time:.2f}ms")
            self.fetch_succeeded.emit(self.generation, list(records))
        except Exception as e:
            print(f"[FETCHER] ❌ Fetch failed: {e}")
            self.fetch_failed.emit(self.generation, str(e) or type(e).__name__)


class RecordFetcher(QObject):
    """
    Runs a fetch function on a worker thread.

    Only the latest fetch is reported: starting a new fetch or stopping makes
    the results of earlier ones stale, and stale results are discarded.
    """

    fetch_started = Signal()
    fetch_complete = Signal(list)
    fetch_error = Signal(str)

    def __init__(self, fetch_fn: Optional[Callable[[str], list]] = None, parent=None):
        super().__init__(parent)
        self.fetch_fn = fetch_fn or json_file_fetch
        self.current_worker: Optional[FetchWorkerThread] = None
        self._generation = 0
        self._finished_workers = []

    def start_fetch(self, query: str) -> bool:
        """Start fetching for ``query``. Returns False if the worker could not be started."""
        self.stop_fetch()
        self._generation += 1
        print(f"[FETCHER] 🚀 Starting fetch #{self._generation}: {query!r}")

        try:
            worker = FetchWorkerThread(self.fetch_fn, query, self._generation)
            worker.fetch_succeeded.connect(self._on_fetch_succeeded)
            worker.fetch_failed.connect(self._on_fetch_failed)
            worker.finished.connect(self._on_worker_finished)
            self.current_worker = worker
            self.fetch_started.emit()
            worker.start()
            return True
        except Exception as e:
            print(f"[FETCHER] ❌ Failed to start fetch: {e}")
            self.current_worker = None
            self.fetch_error.emit(str(e))
            return False

    def stop_fetch(self):
        """Forget the running fetch; its results will be ignored when they arrive."""
        if self.current_worker is not None and self.current_worker.isRunning():
            print(f"[FETCHER] 🛑 Discarding results of fetch #{self.current_worker.generation}")
            # Keep a reference until the thread actually finishes
            self._finished_workers.append(self.current_worker)
        self._generation += 1
        self.current_worker = None

    def is_fetching(self) -> bool:
        return self.current_worker is not None and self.current_worker.isRunning()

    def wait(self, timeout_ms: int = 5000) -> bool:
        """Block until the current worker finishes. Used at shutdown and in tests."""
        if self.current_worker is None:
            return True
        return self.current_worker.wait(timeout_ms)

    def _on_fetch_succeeded(self, generation: int, records: list):
        if generation != self._generation:
            print(f"[FETCHER] ⏭️ Ignoring stale results from fetch #{generation}")
            return
        self.fetch_complete.emit(records)

    def _on_fetch_failed(self, generation: int, error: str):
        if generation != self._generation:
            return
        self.fetch_error.emit(error)

    @Slot()
    def _on_worker_finished(self):
        worker = self.sender()
        if worker in self._finished_workers:
            self._finished_workers.remove(worker)
        if worker is self.current_worker:
            self.current_worker = None
        if worker is not None:
            worker.deleteLater()

    def cleanup(self):
        """Clean up resources."""
        workers = list(self._finished_workers)
        if self.current_worker is not None:
            workers.append(self.current_worker)
        self.stop_fetch()
        for worker in workers:
            worker.quit()
            worker.wait()
