"""
Shifted Clock

Maps instants onto work days. A work day starts at midnight plus a shift,
so with a 5 hour shift anything before 05:00 still belongs to the
previous calendar date.
"""

from datetime import datetime, time as dt_time, timedelta

WorkDay = str

DATE_FORMAT = '%Y-%m-%d'


class ShiftedClock:
    """Converts wall-clock instants into work day identifiers."""

    def __init__(self, shift: timedelta = timedelta(hours=5)):
        if shift < timedelta(0) or shift >= timedelta(hours=24):
            raise ValueError(f"shift must be within [0h, 24h): {shift}")
        self.shift = shift

    def work_day_of(self, instant: datetime) -> WorkDay:
        """Return the work day (YYYY-MM-DD) that ``instant`` belongs to."""
        return (instant - self.shift).strftime(DATE_FORMAT)

    def is_overnight(self, a: datetime, b: datetime) -> bool:
        """True when ``a`` and ``b`` fall into different work days."""
        return self.work_day_of(a) != self.work_day_of(b)

    def shift_midnight(self, instant: datetime) -> datetime:
        """Return the instant at which the work day containing ``instant`` ends."""
        shifted = instant - self.shift
        next_midnight = datetime.combine(
            shifted.date() + timedelta(days=1), dt_time(0), tzinfo=instant.tzinfo
        )
        return next_midnight + self.shift

    def resolve(self, day: WorkDay, clock_time: str, tzinfo=None) -> datetime:
        """
        Turn an ``HH:MM`` typed for a work day into an instant.

        Clock times earlier than the shift are past calendar midnight and
        land on the following date.

        Args:
            day: Work day identifier (YYYY-MM-DD)
            clock_time: Wall-clock time in HH:MM format
            tzinfo: Timezone for the result (local timezone when omitted)

        Returns:
            The resolved instant
        """
        try:
            date = datetime.strptime(day, DATE_FORMAT).date()
            parsed = datetime.strptime(clock_time, '%H:%M').time()
        except ValueError:
            raise ValueError(f"invalid day or time: {day} {clock_time} (expected YYYY-MM-DD HH:MM)")

        instant = datetime.combine(date, parsed)
        if instant - datetime.combine(date, dt_time(0)) < self.shift:
            instant += timedelta(days=1)
        if tzinfo is None:
            return instant.astimezone()
        return instant.replace(tzinfo=tzinfo)
