"""
Error types raised by the tracker and its collaborators.
"""


class WorklogError(Exception):
    """Base class for all worklog errors."""


class ConsistencyError(WorklogError):
    """Persisted state contradicts itself, e.g. working with no last activity."""


class StoreError(WorklogError):
    """The report store could not be read or written."""


class NotifierError(WorklogError):
    """A desktop notification could not be delivered."""


class WatcherError(WorklogError):
    """An activity watcher failed to start or stopped with an error."""

    def __init__(self, watcher_name: str, cause: BaseException):
        super().__init__(f"watcher {watcher_name} failed: {cause}")
        self.watcher_name = watcher_name
        self.cause = cause
