"""
Command Line Interface Module

Provides CLI commands for running the monitor and reviewing or correcting
the recorded work sessions.
"""

import signal
import sys
from datetime import datetime
from typing import List, Optional

import click
import yaml

from .clock import DATE_FORMAT, ShiftedClock
from .config import ConfigManager
from .locking import FileLock
from .logging_setup import get_logger, setup_logging
from .models import WorkSession
from .monitor import ActivityMonitor
from .notifier import DesktopNotifier
from .report import (current_month, delete_break, delete_session, export_csv,
                     format_clock, format_duration, list_month, set_break,
                     set_session, total_working_time)
from .storage import Database, ReportRepository
from .tracker import WorkSessionTracker
from .watchers import build_watchers

WEEKDAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']


def build_tracker(config: ConfigManager, notify: bool = False) -> WorkSessionTracker:
    """Wire the store, lock, notifier and clock into a tracker."""
    db = Database(config.get_db_path())
    db.init_schema()
    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        ctx.call_on_close(db.close)

    notifier = DesktopNotifier(
        app_name=config.get('notifications.app_name'),
        timeout=config.get('notifications.timeout_seconds'),
        enabled=notify and config.get('notifications.enabled'),
    )
    return WorkSessionTracker(
        repository=ReportRepository(db),
        notifier=notifier,
        lock=FileLock(config.get_lock_path()),
        clock=ShiftedClock(config.get_shift_duration()),
        start_break_interval=config.get_start_break_interval(),
        finish_working_interval=config.get_finish_working_interval(),
    )


def _check_day(day: str) -> str:
    try:
        datetime.strptime(day, DATE_FORMAT)
    except ValueError:
        raise click.BadParameter(f"invalid day {day!r}, e.g. 2024-03-01")
    return day


def _resolve(tracker: WorkSessionTracker, day: str, clock_time: Optional[str]) -> Optional[datetime]:
    if clock_time is None:
        return None
    try:
        return tracker.clock.resolve(day, clock_time)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _format_sessions(sessions: List[WorkSession]) -> List[str]:
    lines = []
    for index, session in enumerate(sessions):
        breaks = ", ".join(f"{format_clock(b.start)} ~ {format_clock(b.end)}" for b in session.breaks)
        lines.append(f"[{index}] {format_clock(session.start)} ~ {format_clock(session.end)}"
                     + (f"  breaks: {breaks}" if breaks else ""))
    return lines


def _fail(logger, action: str, error: Exception) -> None:
    logger.error(f"{action} failed: {error}")
    click.echo(f"Error {action.lower()}: {error}", err=True)
    sys.exit(1)


@click.group()
@click.option('--config', '-c', default='config.yaml',
              help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """worklog - automatic attendance log from keyboard and mouse activity."""
    ctx.ensure_object(dict)

    try:
        config_manager = ConfigManager(config)
        if not config_manager.validate():
            raise ValueError(f"invalid configuration in {config}")
        ctx.obj['config'] = config_manager

        log_level = 'DEBUG' if verbose else config_manager.get('logging.level', 'INFO')
        log_file = config_manager.get_log_file_path()
        max_size = config_manager.get('logging.max_log_size_mb', 10)
        backup_count = config_manager.get('logging.backup_count', 3)

        # Report commands print to stdout; keep the console to warnings there.
        if verbose or ctx.invoked_subcommand == 'monitor':
            console_level = log_level
        else:
            console_level = 'WARNING'
        setup_logging(log_file, log_level, max_size, backup_count, console_level)
        ctx.obj['logger'] = get_logger('worklog.cli')

        config_manager.ensure_directories()

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def monitor(ctx):
    """Watch keyboard and mouse activity and record work sessions."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        tracker = build_tracker(config, notify=True)
        watchers = build_watchers(
            keyboard=config.get('watchers.keyboard'),
            mouse=config.get('watchers.mouse'),
            mouse_interval=config.get('watchers.mouse_interval_seconds'),
            mouse_threshold=config.get('watchers.mouse_threshold_pixels'),
        )
        activity_monitor = ActivityMonitor(tracker, watchers, config.get_polling_interval())

        def signal_handler(signum, frame):
            logger.info("Received shutdown signal")
            activity_monitor.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        click.echo("worklog monitor started. Press Ctrl+C to stop...")
        activity_monitor.run()
        click.echo("\nworklog monitor stopped.")

    except Exception as e:
        _fail(logger, "Monitoring", e)


@cli.command()
@click.pass_context
def status(ctx):
    """Show the current status and today's sessions."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        tracker = build_tracker(config)
        now = datetime.now().astimezone()
        last_activity_at = tracker.last_activity_at()
        day = tracker.clock.work_day_of(now)

        click.echo(f"Status: {tracker.current_status().value}")
        if last_activity_at is not None:
            click.echo(f"Last activity: {last_activity_at:%Y-%m-%d %H:%M}")
        else:
            click.echo("Last activity: never")
        click.echo(f"Work day {day} ends at {tracker.clock.shift_midnight(now):%Y-%m-%d %H:%M}")

        sessions = tracker.daily_report(day)
        click.echo(f"\nSessions on {day}:")
        for line in _format_sessions(sessions) or ["(none)"]:
            click.echo(f"  {line}")

    except Exception as e:
        _fail(logger, "Status check", e)


@cli.command()
@click.argument('year_month', required=False)
@click.pass_context
def view(ctx, year_month):
    """List the sessions of a month (YYYY-MM, default current month)."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        tracker = build_tracker(config)
        entries = list_month(tracker.daily_report, year_month or current_month())

        click.echo(f"{'Date':<13}{'Break':>7}{'Work':>7}  Sessions")
        for entry in entries:
            day = datetime.strptime(entry.day, DATE_FORMAT)
            label = f"{day:%m/%d} ({WEEKDAYS[day.weekday()]})"
            lines = _format_sessions(entry.sessions) or [""]
            click.echo(f"{label:<13}{format_duration(entry.break_time):>7}"
                       f"{format_duration(entry.working_time):>7}  {lines[0]}")
            for line in lines[1:]:
                click.echo(f"{'':<27}{line}")
        click.echo(f"\nTotal working time: {format_duration(total_working_time(entries))}")

    except Exception as e:
        _fail(logger, "View", e)


@cli.command()
@click.argument('year_month', required=False)
@click.option('--output', '-o', default=None,
              help='Output CSV file (default worklog-YYYY-MM.csv)')
@click.pass_context
def export(ctx, year_month, output):
    """Export a month of sessions to CSV."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        year_month = year_month or current_month()
        output = output or f"worklog-{year_month}.csv"
        tracker = build_tracker(config)
        export_csv(list_month(tracker.daily_report, year_month), output)
        click.echo(f"Report exported to: {output}")

    except Exception as e:
        _fail(logger, "Export", e)


@cli.group()
def session():
    """Correct recorded work sessions."""


@session.command('set')
@click.argument('day')
@click.argument('index', type=int)
@click.option('--start', '-s', required=True, help='Start time (HH:MM)')
@click.option('--end', '-e', default=None, help='End time (HH:MM), omit to leave open')
@click.pass_context
def session_set(ctx, day, index, start, end):
    """Set session INDEX of DAY (YYYY-MM-DD); the next free index adds one."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    day = _check_day(day)
    try:
        tracker = build_tracker(config)
        start_at = _resolve(tracker, day, start)
        end_at = _resolve(tracker, day, end)
        sessions = tracker.edit_daily_report(day, lambda s: set_session(s, index, start_at, end_at))
        for line in _format_sessions(sessions):
            click.echo(line)

    except click.BadParameter:
        raise
    except Exception as e:
        _fail(logger, "Session update", e)


@session.command('delete')
@click.argument('day')
@click.argument('index', type=int)
@click.pass_context
def session_delete(ctx, day, index):
    """Delete session INDEX of DAY."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    day = _check_day(day)
    try:
        tracker = build_tracker(config)
        tracker.edit_daily_report(day, lambda s: delete_session(s, index))
        click.echo(f"Session {index} of {day} deleted")

    except Exception as e:
        _fail(logger, "Session delete", e)


@cli.group('break')
def break_():
    """Correct recorded breaks."""


@break_.command('set')
@click.argument('day')
@click.argument('session_index', type=int)
@click.argument('index', type=int)
@click.option('--start', '-s', required=True, help='Start time (HH:MM)')
@click.option('--end', '-e', default=None, help='End time (HH:MM), omit to leave open')
@click.pass_context
def break_set(ctx, day, session_index, index, start, end):
    """Set break INDEX of session SESSION_INDEX on DAY."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    day = _check_day(day)
    try:
        tracker = build_tracker(config)
        start_at = _resolve(tracker, day, start)
        end_at = _resolve(tracker, day, end)
        sessions = tracker.edit_daily_report(
            day, lambda s: set_break(s, session_index, index, start_at, end_at)
        )
        for line in _format_sessions(sessions):
            click.echo(line)

    except click.BadParameter:
        raise
    except Exception as e:
        _fail(logger, "Break update", e)


@break_.command('delete')
@click.argument('day')
@click.argument('session_index', type=int)
@click.argument('index', type=int)
@click.pass_context
def break_delete(ctx, day, session_index, index):
    """Delete break INDEX of session SESSION_INDEX on DAY."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    day = _check_day(day)
    try:
        tracker = build_tracker(config)
        tracker.edit_daily_report(day, lambda s: delete_break(s, session_index, index))
        click.echo(f"Break {index} of session {session_index} on {day} deleted")

    except Exception as e:
        _fail(logger, "Break delete", e)


@cli.command()
@click.option('--key', required=True, help='Configuration key (e.g., tracking.shift_hours)')
@click.option('--value', required=True, help='Configuration value')
@click.pass_context
def config_set(ctx, key, value):
    """Set a configuration value."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    try:
        if value.lower() in ('true', 'false'):
            value = value.lower() == 'true'
        elif value.isdigit():
            value = int(value)
        elif value.replace('.', '', 1).isdigit():
            value = float(value)

        config.set(key, value)
        config.save_config()

        click.echo(f"Configuration updated: {key} = {value}")
        logger.info(f"Configuration updated: {key} = {value}")

    except Exception as e:
        _fail(logger, "Configuration update", e)


@cli.command()
@click.option('--key', help='Specific configuration key to show')
@click.pass_context
def config_get(ctx, key):
    """Get configuration value(s)."""
    config = ctx.obj['config']

    if key:
        value = config.get(key)
        if value is not None:
            click.echo(f"{key}: {value}")
        else:
            click.echo(f"Configuration key '{key}' not found")
    else:
        click.echo(yaml.dump(config.config, default_flow_style=False))


if __name__ == '__main__':
    cli()
