from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

import pytz

DEFAULT_TIMEZONE = "UTC"
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True, order=True)
class CalendarDate:
    """Calendar day with no time or zone attached"""
    year: int
    month: int
    day: int

    def __post_init__(self):
        # raises ValueError for impossible dates such as 2025-02-30
        date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> "CalendarDate":
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_datetime(cls, value: datetime, tz: pytz.BaseTzInfo) -> "CalendarDate":
        """Calendar day of an instant as seen in the given zone"""
        return cls.from_date(localize(value, tz).date())

    @classmethod
    def parse(cls, value: str) -> "CalendarDate":
        return cls.from_date(date.fromisoformat(value))

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return self.to_date().isoformat()

    def add_days(self, days: int) -> "CalendarDate":
        return CalendarDate.from_date(self.to_date() + timedelta(days=days))

    def previous(self) -> "CalendarDate":
        return self.add_days(-1)

    def days_since(self, other: "CalendarDate") -> int:
        return self.to_date().toordinal() - other.to_date().toordinal()

    def __str__(self) -> str:
        return self.isoformat()


def get_timezone(name: str) -> pytz.BaseTzInfo:
    return pytz.timezone(name)


def localize(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Naive datetimes are read as wall time in ``tz``; aware ones are converted"""
    if value.tzinfo is None:
        return tz.localize(value)
    return value.astimezone(tz)


class Clock:
    """Single source of "now" and "today" for the engine.

    Every calendar-date decision (streaks, deadline distances) goes through
    one configured zone so that day boundaries are consistent everywhere.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE,
                 now_func: Optional[Callable[[], datetime]] = None):
        self.timezone_name = timezone
        self.tz = get_timezone(timezone)
        self._now_func = now_func

    def now(self) -> datetime:
        if self._now_func is not None:
            return localize(self._now_func(), self.tz)
        return datetime.now(self.tz)

    def today(self) -> CalendarDate:
        return CalendarDate.from_datetime(self.now(), self.tz)

    def localize(self, value: datetime) -> datetime:
        return localize(value, self.tz)

    def to_calendar_date(self, value: Union[datetime, date]) -> CalendarDate:
        if isinstance(value, datetime):
            return CalendarDate.from_datetime(value, self.tz)
        return CalendarDate.from_date(value)

    def days_until(self, moment: datetime, now: Optional[datetime] = None) -> float:
        """Fractional days from ``now`` until ``moment`` (negative when past)"""
        reference = self.localize(now) if now is not None else self.now()
        return (self.localize(moment) - reference).total_seconds() / SECONDS_PER_DAY


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()
