"""
Cross-process lock guarding the tracker state and the report store.
"""

import fcntl
import os
import threading
from pathlib import Path
from typing import IO, Optional, Union


class FileLock:
    """
    Exclusive lock shared by threads of this process and by other processes.

    Acquisition blocks without a timeout. The lock file is opened anew on
    every acquisition so that flock() also excludes other open file
    descriptions of the same file.

    Usage:
        lock = FileLock(Path.home() / ".worklog" / "worklog.lock")
        with lock:
            ...
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._thread_lock = threading.Lock()
        self._file: Optional[IO[str]] = None

    def acquire(self) -> None:
        self._thread_lock.acquire()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a+")
            fcntl.flock(self._file.fileno(), fcntl.LOCK_EX)
            self._file.seek(0)
            self._file.truncate()
            self._file.write(str(os.getpid()))
            self._file.flush()
        except BaseException:
            if self._file is not None:
                self._file.close()
                self._file = None
            self._thread_lock.release()
            raise

    def release(self) -> None:
        try:
            if self._file is not None and not self._file.closed:
                fcntl.flock(self._file.fileno(), fcntl.LOCK_UN)
                self._file.close()
        finally:
            self._file = None
            self._thread_lock.release()

    def __enter__(self) -> 'FileLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
