"""
Rotation period utilities for the monthly leaderboard.

A rotation period is a (year, month) key. Month boundaries are computed in a
configured timezone from whatever "now" the caller passes in, so the result
never depends on how long a process has been running.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo

import pytz

from bot.config import Config


def get_timezone(timezone_name: str = None) -> tzinfo:
    """Resolve a timezone name, defaulting to the configured one."""
    return pytz.timezone(timezone_name or Config.TIMEZONE)


@dataclass(frozen=True, order=True)
class RotationPeriod:
    """One leaderboard cycle, identified by calendar year and month (1-12)."""
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")

    @classmethod
    def containing(cls, moment) -> 'RotationPeriod':
        """Period a date or datetime falls in."""
        return cls(moment.year, moment.month)

    def previous(self) -> 'RotationPeriod':
        if self.month == 1:
            return RotationPeriod(self.year - 1, 12)
        return RotationPeriod(self.year, self.month - 1)

    def next(self) -> 'RotationPeriod':
        if self.month == 12:
            return RotationPeriod(self.year + 1, 1)
        return RotationPeriod(self.year, self.month + 1)

    def starts_at(self, tz: tzinfo) -> datetime:
        """First instant of the period in the given timezone."""
        naive = datetime(self.year, self.month, 1)
        if hasattr(tz, 'localize'):
            return tz.localize(naive)
        return naive.replace(tzinfo=tz)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def local_now(tz: tzinfo = None) -> datetime:
    """Current wall-clock time as an aware datetime."""
    return datetime.now(tz or get_timezone())


def next_month_boundary(now: datetime) -> datetime:
    """
    First instant of the calendar month after ``now``.

    ``now`` must be timezone-aware; the boundary is expressed in the same
    timezone. A ``now`` sitting exactly on a boundary yields the following one.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    tz = getattr(now.tzinfo, 'zone', None)
    tz = pytz.timezone(tz) if tz else now.tzinfo
    return RotationPeriod.containing(now).next().starts_at(tz)


def seconds_until(moment: datetime, now: datetime) -> float:
    """Seconds from ``now`` until ``moment``, never negative."""
    return max(0.0, (moment - now).total_seconds())
