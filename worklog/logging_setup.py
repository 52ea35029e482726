"""
Logging Setup Module

One ``worklog`` logger tree for the whole package. Every record goes to a
rotating log file; the console only gets what the running command needs:
progress for the long-running monitor, warnings for the report commands
whose stdout is their actual output.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = 'worklog'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _level(name: Union[str, int]) -> int:
    if isinstance(name, int):
        return name
    return getattr(logging, str(name).upper(), logging.INFO)


def _rotating_file_handler(log_file: Union[str, Path], max_log_size_mb: int,
                           backup_count: int) -> logging.Handler:
    log_path = Path(log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=max_log_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding='utf-8'
    )


def setup_logging(
    log_file: Optional[Union[str, Path]] = None,
    log_level: Union[str, int] = "INFO",
    max_log_size_mb: int = 10,
    backup_count: int = 3,
    console_level: Union[str, int] = "INFO"
) -> logging.Logger:
    """
    Configure the ``worklog`` logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        log_file: Rotating log file (optional)
        log_level: Level of the logger and of the file handler
        max_log_size_mb: Size in MB at which the log file rotates
        backup_count: Rotated files to keep
        console_level: Minimum level echoed to stderr; never below ``log_level``

    Returns:
        The configured ``worklog`` logger
    """
    level = _level(log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(max(level, _level(console_level)))
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        file_handler = _rotating_file_handler(log_file, max_log_size_mb, backup_count)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Records stay inside the worklog tree.
    logger.propagate = False
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Logger under the ``worklog`` tree, e.g. ``get_logger(__name__)``."""
    return logging.getLogger(name)
