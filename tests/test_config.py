"""Tests for worklog/config.py."""

from datetime import timedelta
from pathlib import Path

import pytest
import yaml

from worklog.config import ConfigManager


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(str(tmp_path / "absent.yaml"))

    assert config.get_shift_duration() == timedelta(hours=5)
    assert config.get_polling_interval() == timedelta(seconds=1)
    assert config.get_start_break_interval() == timedelta(minutes=35)
    assert config.get_finish_working_interval() == timedelta(hours=4)
    assert config.get_db_path() == Path.home() / ".worklog" / "worklog.db"
    assert config.validate()


def test_file_overrides_are_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        'storage': {'data_dir': str(tmp_path / "data")},
        'tracking': {'start_break_minutes': 20},
    }))

    config = ConfigManager(str(path))

    assert config.get_start_break_interval() == timedelta(minutes=20)
    assert config.get('tracking.finish_working_minutes') == 240
    assert config.get_lock_path() == tmp_path / "data" / "worklog.lock"


def test_get_and_set_dot_notation(tmp_path):
    config = ConfigManager(str(tmp_path / "config.yaml"))

    config.set('watchers.mouse_threshold_pixels', 150)
    config.set('extra.nested.value', 'x')

    assert config.get('watchers.mouse_threshold_pixels') == 150
    assert config.get('extra.nested.value') == 'x'
    assert config.get('missing.key', 'fallback') == 'fallback'


def test_save_config_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    config = ConfigManager(str(path))
    config.set('tracking.shift_hours', 4)
    config.save_config()

    assert ConfigManager(str(path)).get_shift_duration() == timedelta(hours=4)


@pytest.mark.parametrize("key,value", [
    ('tracking.shift_hours', 24),
    ('tracking.shift_hours', -1),
    ('tracking.start_break_minutes', 0),
    ('watchers.mouse_interval_seconds', 'often'),
])
def test_validate_rejects_bad_values(tmp_path, key, value):
    config = ConfigManager(str(tmp_path / "config.yaml"))
    config.set(key, value)
    assert not config.validate()


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="must contain a mapping"):
        ConfigManager(str(path))


def test_ensure_directories(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        'storage': {'data_dir': str(tmp_path / "data")},
        'logging': {'log_file': str(tmp_path / "logs" / "worklog.log")},
    }))

    ConfigManager(str(path)).ensure_directories()

    assert (tmp_path / "data").is_dir()
    assert (tmp_path / "logs").is_dir()
