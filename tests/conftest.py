import logging
from datetime import datetime, timedelta, timezone

import pytest

from worklog.clock import ShiftedClock
from worklog.locking import FileLock
from worklog.storage import Database, ReportRepository
from worklog.tracker import WorkSessionTracker

TZ = timezone(timedelta(hours=9))


def at(day: str, clock_time: str) -> datetime:
    """Build an aware instant in the test timezone."""
    return datetime.strptime(f"{day} {clock_time}", "%Y-%m-%d %H:%M").replace(tzinfo=TZ)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def notify(self, title: str, message: str) -> None:
        self.sent.append((title, message))
        if self.fail:
            raise RuntimeError("notification backend unavailable")

    @property
    def titles(self):
        return [title for title, _ in self.sent]


@pytest.fixture(autouse=True)
def reset_worklog_logger():
    yield
    logger = logging.getLogger('worklog')
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "worklog.db")
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def repository(db):
    return ReportRepository(db)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fake_clock():
    return FakeClock(at("2024-03-01", "09:00"))


@pytest.fixture
def lock(tmp_path):
    return FileLock(tmp_path / "worklog.lock")


@pytest.fixture
def tracker(repository, notifier, lock, fake_clock):
    return WorkSessionTracker(
        repository=repository,
        notifier=notifier,
        lock=lock,
        clock=ShiftedClock(timedelta(hours=5)),
        start_break_interval=timedelta(minutes=35),
        finish_working_interval=timedelta(hours=4),
        now=fake_clock,
    )
