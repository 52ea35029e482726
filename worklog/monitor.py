"""
Activity Monitor

Runs the watchers and the poll timer against one tracker. A watcher that
fails, or a poll that raises, ends the monitor.
"""

import queue
import threading
from datetime import timedelta
from typing import List, Sequence

from .errors import WatcherError
from .logging_setup import get_logger
from .tracker import WorkSessionTracker
from .watchers import ActivityWatcher


class ActivityMonitor:
    """Fans activity signals and poll ticks into the tracker."""

    def __init__(self,
                 tracker: WorkSessionTracker,
                 watchers: Sequence[ActivityWatcher],
                 polling_interval: timedelta = timedelta(seconds=1)):
        """
        Initialize the monitor.

        Args:
            tracker: State machine receiving signals and ticks
            watchers: Activity sources, one thread each
            polling_interval: Time between poll ticks
        """
        self.logger = get_logger(__name__)
        self.tracker = tracker
        self.watchers = list(watchers)
        self.polling_interval = polling_interval

        self.errors: "queue.Queue[WatcherError]" = queue.Queue()
        self.stop_event = threading.Event()
        self.threads: List[threading.Thread] = []

    @property
    def is_running(self) -> bool:
        return bool(self.threads) and not self.stop_event.is_set()

    def run(self) -> None:
        """
        Start the watchers and poll until stopped.

        Raises:
            WatcherError: if a watcher fails
            Exception: the first error raised by a poll
        """
        self.stop_event.clear()
        for watcher in self.watchers:
            thread = threading.Thread(
                target=self._watch, args=(watcher,), name=watcher.name, daemon=True
            )
            self.threads.append(thread)
            thread.start()

        self.logger.info(f"Monitoring started with {len(self.watchers)} watcher(s)")
        timeout = self.polling_interval.total_seconds()
        try:
            while not self.stop_event.is_set():
                try:
                    error = self.errors.get(timeout=timeout)
                except queue.Empty:
                    if self.stop_event.is_set():
                        break
                    self.tracker.poll()
                    continue
                raise error
        finally:
            self.stop()
        self.logger.info("Monitoring stopped")

    def stop(self) -> None:
        if self.stop_event.is_set():
            return
        self.stop_event.set()
        for watcher in self.watchers:
            stop = getattr(watcher, "stop", None)
            if stop is not None:
                stop()

    def _watch(self, watcher: ActivityWatcher) -> None:
        self.logger.debug(f"Start watching: {watcher.name}")
        try:
            watcher.watch(lambda: self._on_signal(watcher))
        except Exception as e:
            self.errors.put(WatcherError(watcher.name, e))
            return

        if not self.stop_event.is_set():
            self.errors.put(WatcherError(watcher.name, RuntimeError("watcher stopped unexpectedly")))

    def _on_signal(self, watcher: ActivityWatcher) -> None:
        try:
            self.tracker.handle_activity()
        except Exception as e:
            self.logger.error(f"Failed to handle activity from {watcher.name}: {e}")
