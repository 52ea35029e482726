"""
Report Review and Editing

Month listings, totals, CSV export and the list edits behind the manual
correction commands. Edits return a new list; saving it is up to the caller.
"""

import copy
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Union

import pandas as pd

from .clock import DATE_FORMAT, WorkDay
from .logging_setup import get_logger
from .models import Break, WorkSession

logger = get_logger(__name__)

FRAME_COLUMNS = [
    'date', 'session', 'work_start', 'work_end',
    'break_start', 'break_end', 'break_time', 'working_time',
]


@dataclass
class DailyEntry:
    day: WorkDay
    sessions: List[WorkSession] = field(default_factory=list)

    @property
    def working_time(self) -> timedelta:
        return sum((s.total_working_time() for s in self.sessions), timedelta(0))

    @property
    def break_time(self) -> timedelta:
        return sum((s.total_break_time() for s in self.sessions), timedelta(0))


def month_days(year_month: str) -> List[WorkDay]:
    """Every work day of a YYYY-MM month."""
    try:
        first = datetime.strptime(year_month, '%Y-%m').date()
    except ValueError:
        raise ValueError(f"invalid month {year_month!r}, e.g. 2024-03")

    days = []
    current = first
    while current.month == first.month:
        days.append(current.strftime(DATE_FORMAT))
        current += timedelta(days=1)
    return days


def current_month() -> str:
    return date.today().strftime('%Y-%m')


def list_month(load: Callable[[WorkDay], List[WorkSession]], year_month: str) -> List[DailyEntry]:
    """
    Load the reports of every day in a month.

    Args:
        load: Returns the sessions of one work day
        year_month: Month in YYYY-MM format

    Returns:
        One entry per day, empty days included
    """
    return [DailyEntry(day=day, sessions=load(day)) for day in month_days(year_month)]


def total_working_time(entries: List[DailyEntry]) -> timedelta:
    return sum((e.working_time for e in entries), timedelta(0))


def format_duration(duration: timedelta) -> str:
    """HH:MM, rounding leftover seconds up to the next minute."""
    minutes = max(0, math.ceil(duration.total_seconds() / 60))
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def format_clock(instant: Optional[datetime]) -> str:
    return instant.strftime('%H:%M') if instant is not None else '--:--'


def to_frame(entries: List[DailyEntry]) -> pd.DataFrame:
    """
    Flatten entries into one row per break.

    Sessions without breaks and days without sessions get a single row.
    """
    rows = []
    for entry in entries:
        totals = {
            'break_time': format_duration(entry.break_time),
            'working_time': format_duration(entry.working_time),
        }
        if not entry.sessions:
            rows.append({'date': entry.day, **totals})
            continue

        for index, session in enumerate(entry.sessions):
            base = {
                'date': entry.day,
                'session': index,
                'work_start': format_clock(session.start),
                'work_end': format_clock(session.end),
                **totals,
            }
            if not session.breaks:
                rows.append(base)
            for b in session.breaks:
                rows.append({**base, 'break_start': format_clock(b.start), 'break_end': format_clock(b.end)})

    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame['session'] = frame['session'].astype('Int64')
    return frame


def export_csv(entries: List[DailyEntry], filepath: Union[str, Path]) -> None:
    """
    Export entries to a CSV file.

    Args:
        entries: Daily entries to export
        filepath: Path to save CSV file
    """
    try:
        to_frame(entries).to_csv(filepath, index=False)
        logger.info(f"Report exported to {filepath}")
    except Exception as e:
        logger.error(f"Failed to export report: {e}")
        raise


def _check_interval(start: datetime, end: Optional[datetime]) -> None:
    if end is not None and end < start:
        raise ValueError(f"end {end:%H:%M} is before start {start:%H:%M}")


def _check_open_entries(sessions: List[WorkSession]) -> None:
    # Only the last session of a day, and the last break of a session, may be open.
    for index, session in enumerate(sessions):
        if session.is_open and index != len(sessions) - 1:
            raise ValueError(f"only the last session of a day may be left open (session {index} is open)")
        for break_index, b in enumerate(session.breaks[:-1]):
            if b.is_open:
                raise ValueError(f"only the last break of a session may be left open "
                                 f"(break {break_index} of session {index} is open)")


def set_session(sessions: List[WorkSession], index: int,
                start: datetime, end: Optional[datetime] = None) -> List[WorkSession]:
    """Change a session's start and end; ``index == len(sessions)`` appends one."""
    _check_interval(start, end)
    if not 0 <= index <= len(sessions):
        raise IndexError(f"no session {index} (day has {len(sessions)})")

    result = copy.deepcopy(sessions)
    if index == len(result):
        result.append(WorkSession(start=start, end=end))
    else:
        result[index].start = start
        result[index].end = end

    _check_open_entries(result)
    return result


def delete_session(sessions: List[WorkSession], index: int) -> List[WorkSession]:
    if not 0 <= index < len(sessions):
        raise IndexError(f"no session {index} (day has {len(sessions)})")
    result = copy.deepcopy(sessions)
    del result[index]
    return result


def set_break(sessions: List[WorkSession], session_index: int, break_index: int,
              start: datetime, end: Optional[datetime] = None) -> List[WorkSession]:
    """Change a break's start and end; ``break_index == len(breaks)`` appends one."""
    _check_interval(start, end)
    if not 0 <= session_index < len(sessions):
        raise IndexError(f"no session {session_index} (day has {len(sessions)})")

    result = copy.deepcopy(sessions)
    breaks = result[session_index].breaks
    if not 0 <= break_index <= len(breaks):
        raise IndexError(f"no break {break_index} (session has {len(breaks)})")

    if break_index == len(breaks):
        breaks.append(Break(start=start, end=end))
    else:
        breaks[break_index].start = start
        breaks[break_index].end = end

    _check_open_entries(result)
    return result


def delete_break(sessions: List[WorkSession], session_index: int, break_index: int) -> List[WorkSession]:
    if not 0 <= session_index < len(sessions):
        raise IndexError(f"no session {session_index} (day has {len(sessions)})")
    result = copy.deepcopy(sessions)
    breaks = result[session_index].breaks
    if not 0 <= break_index < len(breaks):
        raise IndexError(f"no break {break_index} (session has {len(breaks)})")
    del breaks[break_index]
    return result
