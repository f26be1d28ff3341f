"""
Periodic refresh of a dashboard view.

A Poller fetches once on start, then again every `interval` seconds on a
daemon thread, replacing its latest result wholesale each time. refresh()
fetches on the caller's thread and may overlap a tick; whichever fetch
resolves last wins. stop() ends the loop; a fetch already in flight is not
cancelled but its result is dropped.
"""
import logging
import threading
import time

logger = logging.getLogger(__name__)


class Poller:
    def __init__(self, fetch, interval, on_result=None, on_error=None, name="poller"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch = fetch
        self.interval = interval
        self.on_result = on_result
        self.on_error = on_error
        self.name = name

        self.latest = None
        self.last_error = None
        self.last_refreshed_at = None

        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive() and not self._stopped.is_set()

    def start(self):
        if self.running:
            return self
        self._stopped.clear()
        self.refresh()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info("🔁 %s polling every %ss", self.name, self.interval)
        return self

    def _run(self):
        while not self._stopped.wait(self.interval):
            self.refresh()

    def refresh(self):
        """Fetch now. Errors are recorded and reported, never raised into the loop."""
        try:
            result = self.fetch()
        except Exception as exc:
            logger.warning("⚠️ %s refresh failed: %s", self.name, exc)
            with self._lock:
                self.last_error = exc
            if self.on_error is not None:
                self.on_error(exc)
            return None

        if self._stopped.is_set():
            return None

        with self._lock:
            self.latest = result
            self.last_error = None
            self.last_refreshed_at = time.time()
        if self.on_result is not None:
            self.on_result(result)
        return result

    def stop(self, timeout=None):
        self._stopped.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("⏹️ %s stopped", self.name)

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
