"""
Work Session Tracker

The state machine behind the monitor. Activity signals start work and end
breaks; the periodic poll turns inactivity into breaks, ends sessions and
closes the previous day when a work-day boundary has been crossed.

Every transition runs under the store lock and reads, changes and writes
whole daily reports. Session and break ends are anchored to the last
observed activity, never to the time of the poll.
"""

from datetime import datetime, timedelta
from typing import Callable, ContextManager, List, Optional

from .clock import ShiftedClock, WorkDay
from .errors import ConsistencyError
from .logging_setup import get_logger
from .models import Status, WorkSession
from .notifier import Notifier
from .storage import ReportRepository

WORK_STARTED = ("Work started", "Let's get going.")
WORK_FINISHED = ("Work finished", "Good work today.")
BREAK_STARTED = ("Break started", "Take it easy.")
BREAK_FINISHED = ("Break finished", "Back to it.")


def local_now() -> datetime:
    return datetime.now().astimezone()


class WorkSessionTracker:
    """Decides status transitions and applies them to the daily reports."""

    def __init__(self,
                 repository: ReportRepository,
                 notifier: Notifier,
                 lock: ContextManager,
                 clock: ShiftedClock,
                 start_break_interval: timedelta = timedelta(minutes=35),
                 finish_working_interval: timedelta = timedelta(hours=4),
                 now: Optional[Callable[[], datetime]] = None):
        """
        Initialize the tracker.

        Args:
            repository: Store for status, last activity and daily reports
            notifier: Receives a notification on every transition
            lock: Exclusive lock held for the duration of each operation
            clock: Maps instants onto work days
            start_break_interval: Inactivity after which a break starts
            finish_working_interval: Break length after which work ends
            now: Wall-clock source (local time by default)
        """
        self.logger = get_logger(__name__)
        self.repository = repository
        self.notifier = notifier
        self.lock = lock
        self.clock = clock
        self.start_break_interval = start_break_interval
        self.finish_working_interval = finish_working_interval
        self._now = now or local_now

    def handle_activity(self) -> None:
        """Record an activity signal and start work or end a break."""
        with self.lock:
            now = self._now()
            self.repository.set_last_activity_at(now)

            status = self.repository.get_status()
            self.logger.debug(f"Activity at {now.isoformat()} while {status.value}")

            if status is Status.OFF:
                self._start_new_working(now)
            elif status is Status.BREAKING:
                self._finish_breaking(now)

    def poll(self) -> None:
        """Check elapsed inactivity and start a break or finish work."""
        with self.lock:
            status = self.repository.get_status()
            if status is Status.OFF:
                return

            last_activity_at = self.repository.get_last_activity_at()
            if last_activity_at is None:
                raise ConsistencyError(f"status is {status.value} but no last activity is recorded")

            now = self._now()
            self.logger.debug(f"Poll at {now.isoformat()}: {status.value}, "
                              f"last activity {last_activity_at.isoformat()}")

            if self.clock.is_overnight(now, last_activity_at):
                self.logger.info(f"Work day {self.clock.work_day_of(last_activity_at)} is over, "
                                 f"closing it at the last activity")
                self._finish_working(last_activity_at)
                return

            if status is Status.WORKING:
                if now > last_activity_at + self.start_break_interval:
                    self._start_breaking(now, last_activity_at)
            elif status is Status.BREAKING:
                if now > last_activity_at + self.finish_working_interval:
                    self._finish_working(last_activity_at)

    def save_daily_report(self, day: WorkDay, sessions: List[WorkSession]) -> None:
        """Replace a day's report, e.g. after a manual edit."""
        with self.lock:
            self.repository.set_daily_report(day, sessions)
            self.logger.info(f"Report for {day} saved ({len(sessions)} session(s))")

    def edit_daily_report(self, day: WorkDay,
                          edit: Callable[[List[WorkSession]], List[WorkSession]]) -> List[WorkSession]:
        """Load a day's report, apply ``edit`` and save the result in one locked step."""
        with self.lock:
            sessions = edit(self.repository.get_daily_report(day))
            self.repository.set_daily_report(day, sessions)
        self.logger.info(f"Report for {day} edited ({len(sessions)} session(s))")
        return sessions

    def current_status(self) -> Status:
        with self.lock:
            return self.repository.get_status()

    def last_activity_at(self) -> Optional[datetime]:
        with self.lock:
            return self.repository.get_last_activity_at()

    def daily_report(self, day: WorkDay) -> List[WorkSession]:
        with self.lock:
            return self.repository.get_daily_report(day)

    def _start_new_working(self, now: datetime) -> None:
        day = self.clock.work_day_of(now)
        sessions = self.repository.get_daily_report(day)
        sessions.append(WorkSession(start=now))
        self.repository.set_daily_report(day, sessions)
        self.repository.set_status(Status.WORKING)

        self.logger.info(f"Work started at {now:%H:%M} ({day})")
        self._notify(*WORK_STARTED)

    def _finish_working(self, end_at: datetime) -> None:
        day = self.clock.work_day_of(end_at)
        sessions = self.repository.get_daily_report(day)
        if sessions:
            session = sessions[-1]
            # A break that never ended is not a break; the session just stopped.
            dropped = session.drop_open_break()
            if dropped is not None:
                self.logger.debug(f"Dropped unfinished break from {dropped.start:%H:%M}")
            if session.is_open:
                if end_at < session.start:
                    self.logger.warning(f"Last activity {end_at.isoformat()} precedes session start "
                                        f"{session.start.isoformat()}, ending at the start")
                    end_at = session.start
                session.close(end_at)
            else:
                # Closed by a manual edit; the typed end stands.
                self.logger.info(f"Last session in {day} already ended at {session.end:%H:%M}")
            self.repository.set_daily_report(day, sessions)
        else:
            self.logger.warning(f"No session to close in report {day}")
        self.repository.set_status(Status.OFF)

        self.logger.info(f"Work finished at {end_at:%H:%M} ({day})")
        self._notify(*WORK_FINISHED)

    def _start_breaking(self, now: datetime, start_at: datetime) -> None:
        day = self.clock.work_day_of(now)
        sessions = self.repository.get_daily_report(day)
        if not sessions or not sessions[-1].is_open:
            self.logger.warning(f"No open session in report {day} to start a break in")
            return

        session = sessions[-1]
        if session.has_open_break:
            self.logger.warning(f"Session in {day} already has an open break")
        else:
            session.open_break(start_at)
            self.repository.set_daily_report(day, sessions)
        self.repository.set_status(Status.BREAKING)

        self.logger.info(f"Break started at {start_at:%H:%M} ({day})")
        self._notify(*BREAK_STARTED)

    def _finish_breaking(self, now: datetime) -> None:
        day = self.clock.work_day_of(now)
        sessions = self.repository.get_daily_report(day)
        if sessions and sessions[-1].is_open and sessions[-1].close_break(now):
            self.repository.set_daily_report(day, sessions)
        else:
            self.logger.warning(f"No open break in report {day} to finish")
        self.repository.set_status(Status.WORKING)

        self.logger.info(f"Break finished at {now:%H:%M} ({day})")
        self._notify(*BREAK_FINISHED)

    def _notify(self, title: str, message: str) -> None:
        try:
            self.notifier.notify(title, message)
        except Exception as e:
            self.logger.warning(f"Notification failed: {e}")
