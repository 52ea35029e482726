"""
Data Model

Work sessions, breaks and the process-wide status. Sessions and breaks
serialize to JSON-compatible dicts with ISO-8601 instants; open intervals
carry ``None`` as their end.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional


class Status(str, Enum):
    """Current attendance status."""
    OFF = "off"
    WORKING = "working"
    BREAKING = "breaking"


def _format_instant(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_instant(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value is not None else None


@dataclass
class Break:
    """A pause inside a work session."""
    start: datetime
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    def duration(self) -> timedelta:
        """Length of the break; open breaks count as zero."""
        if self.end is None:
            return timedelta(0)
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_at': _format_instant(self.start),
            'end_at': _format_instant(self.end),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Break':
        return cls(start=_parse_instant(data['start_at']), end=_parse_instant(data.get('end_at')))


@dataclass
class WorkSession:
    """One contiguous attendance record, possibly containing breaks."""
    start: datetime
    end: Optional[datetime] = None
    breaks: List[Break] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def last_break(self) -> Optional[Break]:
        return self.breaks[-1] if self.breaks else None

    @property
    def has_open_break(self) -> bool:
        last = self.last_break
        return last is not None and last.is_open

    def close(self, end: datetime) -> None:
        """Set the end of the session."""
        if end < self.start:
            raise ValueError(f"session end {end} is before its start {self.start}")
        self.end = end

    def open_break(self, start: datetime) -> None:
        """Append an open break starting at ``start``."""
        if self.has_open_break:
            raise ValueError("session already has an open break")
        self.breaks.append(Break(start=start))

    def close_break(self, end: datetime) -> bool:
        """Close the trailing open break. Returns False when there is none."""
        if not self.has_open_break:
            return False
        self.breaks[-1].end = end
        return True

    def drop_open_break(self) -> Optional[Break]:
        """Remove and return a trailing open break, if any."""
        if not self.has_open_break:
            return None
        return self.breaks.pop()

    def total_break_time(self) -> timedelta:
        return sum((b.duration() for b in self.breaks), timedelta(0))

    def total_working_time(self) -> timedelta:
        """Session length minus closed breaks; zero while the session is open."""
        if self.end is None:
            return timedelta(0)
        return self.end - self.start - self.total_break_time()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_at': _format_instant(self.start),
            'end_at': _format_instant(self.end),
            'breaks': [b.to_dict() for b in self.breaks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkSession':
        return cls(
            start=_parse_instant(data['start_at']),
            end=_parse_instant(data.get('end_at')),
            breaks=[Break.from_dict(b) for b in data.get('breaks') or []],
        )
