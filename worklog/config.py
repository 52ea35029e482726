"""
Configuration Management Module

Loads settings from a YAML file layered over built-in defaults.
"""

import copy
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    'storage': {
        'data_dir': '~/.worklog',
    },
    'tracking': {
        'shift_hours': 5,
        'polling_interval_seconds': 1,
        'start_break_minutes': 35,
        'finish_working_minutes': 240,
    },
    'watchers': {
        'keyboard': True,
        'mouse': True,
        'mouse_interval_seconds': 30,
        'mouse_threshold_pixels': 100,
    },
    'notifications': {
        'enabled': True,
        'app_name': 'worklog',
        'timeout_seconds': 10,
    },
    'logging': {
        'level': 'INFO',
        'log_file': '~/.worklog/worklog.log',
        'max_log_size_mb': 10,
        'backup_count': 3,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manages application configuration settings."""

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        A missing file is not an error; the defaults apply.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self.config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            loaded: Dict[str, Any] = {}
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as file:
                    loaded = yaml.safe_load(file) or {}
                if not isinstance(loaded, dict):
                    raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")

            self.config = _merge(DEFAULT_CONFIG, loaded)

        except Exception as e:
            logging.error(f"Failed to load configuration: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'tracking.shift_hours')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'tracking.start_break_minutes')
            value: Value to set
        """
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref:
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as file:
                yaml.dump(self.config, file, default_flow_style=False, indent=2)
        except Exception as e:
            logging.error(f"Failed to save configuration: {e}")
            raise

    def validate(self) -> bool:
        """Validate the tracking and watcher settings."""
        shift = self.get('tracking.shift_hours')
        if not isinstance(shift, (int, float)) or not 0 <= shift < 24:
            logging.error(f"Invalid shift: {shift} (expected hours in [0, 24))")
            return False

        positive = [
            'tracking.polling_interval_seconds',
            'tracking.start_break_minutes',
            'tracking.finish_working_minutes',
            'watchers.mouse_interval_seconds',
            'watchers.mouse_threshold_pixels',
        ]
        for field in positive:
            value = self.get(field)
            if not isinstance(value, (int, float)) or value <= 0:
                logging.error(f"Invalid value for {field}: {value}")
                return False

        return True

    def get_shift_duration(self) -> timedelta:
        return timedelta(hours=self.get('tracking.shift_hours'))

    def get_polling_interval(self) -> timedelta:
        return timedelta(seconds=self.get('tracking.polling_interval_seconds'))

    def get_start_break_interval(self) -> timedelta:
        return timedelta(minutes=self.get('tracking.start_break_minutes'))

    def get_finish_working_interval(self) -> timedelta:
        return timedelta(minutes=self.get('tracking.finish_working_minutes'))

    def get_data_dir(self) -> Path:
        return Path(self.get('storage.data_dir')).expanduser()

    def get_db_path(self) -> Path:
        return self.get_data_dir() / 'worklog.db'

    def get_lock_path(self) -> Path:
        return self.get_data_dir() / 'worklog.lock'

    def get_log_file_path(self) -> Path:
        """Get the full path to the log file."""
        return Path(self.get('logging.log_file')).expanduser()

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        directories = [
            self.get_data_dir(),
            self.get_log_file_path().parent,
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
