"""Tests for worklog/monitor.py."""

import threading
from datetime import timedelta

import pytest

from worklog.errors import ConsistencyError, WatcherError
from worklog.monitor import ActivityMonitor

INTERVAL = timedelta(milliseconds=10)


class FakeTracker:
    def __init__(self, fail_first_activity=False, poll_error=None):
        self.monitor = None
        self.polls = 0
        self.activities = 0
        self.fail_first_activity = fail_first_activity
        self.poll_error = poll_error
        self.stop_after_activities = None

    def handle_activity(self):
        self.activities += 1
        if self.fail_first_activity and self.activities == 1:
            raise RuntimeError("store unavailable")

    def poll(self):
        self.polls += 1
        if self.poll_error is not None:
            raise self.poll_error
        done = self.stop_after_activities is not None and self.activities >= self.stop_after_activities
        if done or self.polls >= 500:
            self.monitor.stop()


class SignalWatcher:
    name = "SignalWatcher"

    def __init__(self, count):
        self.count = count
        self.stopped = threading.Event()

    def watch(self, on_signal):
        for _ in range(self.count):
            on_signal()
        self.stopped.wait()

    def stop(self):
        self.stopped.set()


class FailingWatcher:
    name = "FailingWatcher"

    def watch(self, on_signal):
        raise OSError("no display")


class ReturningWatcher:
    name = "ReturningWatcher"

    def watch(self, on_signal):
        return None


def _monitor(tracker, watchers):
    monitor = ActivityMonitor(tracker, watchers, INTERVAL)
    tracker.monitor = monitor
    return monitor


def test_polls_until_stopped():
    tracker = FakeTracker()
    tracker.stop_after_activities = 0
    monitor = _monitor(tracker, [])

    monitor.run()

    assert tracker.polls == 1
    assert not monitor.is_running


def test_signal_errors_are_logged_and_processing_continues():
    tracker = FakeTracker(fail_first_activity=True)
    tracker.stop_after_activities = 2
    watcher = SignalWatcher(count=2)
    monitor = _monitor(tracker, [watcher])

    monitor.run()

    assert tracker.activities == 2
    assert watcher.stopped.is_set()


def test_watcher_failure_aborts_monitor():
    tracker = FakeTracker()
    monitor = _monitor(tracker, [FailingWatcher()])

    with pytest.raises(WatcherError) as excinfo:
        monitor.run()

    assert excinfo.value.watcher_name == "FailingWatcher"
    assert isinstance(excinfo.value.cause, OSError)
    assert monitor.stop_event.is_set()


def test_watcher_returning_early_aborts_monitor():
    monitor = _monitor(FakeTracker(), [ReturningWatcher()])

    with pytest.raises(WatcherError, match="stopped unexpectedly"):
        monitor.run()


def test_poll_error_terminates_monitor():
    watcher = SignalWatcher(count=0)
    tracker = FakeTracker(poll_error=ConsistencyError("no last activity"))
    monitor = _monitor(tracker, [watcher])

    with pytest.raises(ConsistencyError):
        monitor.run()

    assert tracker.polls == 1
    assert watcher.stopped.is_set()
