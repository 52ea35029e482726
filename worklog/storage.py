"""
Report Store

A small key-value table in SQLite holding the current status, the time of
the last activity signal and one JSON document per work day.
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .clock import WorkDay
from .errors import StoreError
from .logging_setup import get_logger
from .models import Status, WorkSession

CURRENT_STATUS_KEY = "current_status"
LAST_ACTIVITY_AT_KEY = "last_activity_at"


class Database:
    """Thin wrapper around the SQLite connection."""

    def __init__(self, db_path: Union[str, Path] = "worklog.db"):
        self.db_path = str(db_path)
        try:
            # Watcher threads and the poll loop share the connection; the
            # tracker lock serializes every access.
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(f"failed to open database {self.db_path}: {e}") from e

    def init_schema(self) -> None:
        try:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
            """)
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"failed to initialise schema: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            row = self.conn.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"failed to read {key}: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self.conn.execute(
                "INSERT INTO kv(key, value) VALUES(?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"failed to write {key}: {e}") from e

    def close(self) -> None:
        self.conn.close()


class ReportRepository:
    """Reads and writes tracker state and daily reports."""

    def __init__(self, db: Database):
        self.db = db
        self.logger = get_logger(__name__)

    def get_status(self) -> Status:
        value = self.db.get(CURRENT_STATUS_KEY)
        if value is None:
            return Status.OFF
        try:
            return Status(value)
        except ValueError as e:
            raise StoreError(f"unknown status stored: {value!r}") from e

    def set_status(self, status: Status) -> None:
        self.db.set(CURRENT_STATUS_KEY, status.value)

    def get_last_activity_at(self) -> Optional[datetime]:
        value = self.db.get(LAST_ACTIVITY_AT_KEY)
        if value is None:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError as e:
            raise StoreError(f"invalid last activity timestamp: {value!r}") from e

    def set_last_activity_at(self, instant: datetime) -> None:
        self.db.set(LAST_ACTIVITY_AT_KEY, instant.isoformat())

    def get_daily_report(self, day: WorkDay) -> List[WorkSession]:
        value = self.db.get(day)
        if value is None:
            return []
        try:
            return [WorkSession.from_dict(item) for item in json.loads(value)]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError(f"invalid report stored for {day}: {e}") from e

    def set_daily_report(self, day: WorkDay, sessions: List[WorkSession]) -> None:
        self.logger.debug(f"Saving report for {day}: {len(sessions)} session(s)")
        self.db.set(day, json.dumps([s.to_dict() for s in sessions]))
