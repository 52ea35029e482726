"""Tests for worklog/storage.py."""

import pytest

from conftest import at
from worklog.errors import StoreError
from worklog.models import Break, Status, WorkSession
from worklog.storage import Database, ReportRepository


def test_defaults_before_first_signal(repository):
    assert repository.get_status() is Status.OFF
    assert repository.get_last_activity_at() is None
    assert repository.get_daily_report("2024-03-01") == []


def test_status_and_last_activity(repository):
    repository.set_status(Status.BREAKING)
    repository.set_last_activity_at(at("2024-03-01", "09:15"))

    assert repository.get_status() is Status.BREAKING
    assert repository.get_last_activity_at() == at("2024-03-01", "09:15")


def test_daily_report_round_trip(repository):
    sessions = [
        WorkSession(
            start=at("2024-03-01", "09:00"),
            end=at("2024-03-01", "12:00"),
            breaks=[Break(start=at("2024-03-01", "10:00"), end=at("2024-03-01", "10:30"))],
        ),
        WorkSession(start=at("2024-03-01", "13:00"), breaks=[Break(start=at("2024-03-01", "14:00"))]),
    ]
    repository.set_daily_report("2024-03-01", sessions)

    assert repository.get_daily_report("2024-03-01") == sessions
    assert repository.get_daily_report("2024-03-02") == []


def test_set_daily_report_overwrites(repository):
    repository.set_daily_report("2024-03-01", [WorkSession(start=at("2024-03-01", "09:00"))])
    repository.set_daily_report("2024-03-01", [])

    assert repository.get_daily_report("2024-03-01") == []


def test_values_survive_reopen(tmp_path):
    path = tmp_path / "worklog.db"
    db = Database(path)
    db.init_schema()
    ReportRepository(db).set_status(Status.WORKING)
    db.close()

    reopened = Database(path)
    reopened.init_schema()
    assert ReportRepository(reopened).get_status() is Status.WORKING
    reopened.close()


def test_unknown_status_is_store_fault(db, repository):
    db.set("current_status", "sleeping")
    with pytest.raises(StoreError, match="unknown status"):
        repository.get_status()


def test_corrupt_report_is_store_fault(db, repository):
    db.set("2024-03-01", "{not json")
    with pytest.raises(StoreError, match="invalid report"):
        repository.get_daily_report("2024-03-01")


def test_closed_database_is_store_fault(db, repository):
    db.close()
    with pytest.raises(StoreError):
        repository.get_status()
