"""
Time sources.

Anything time-dependent takes a Clock argument instead of reading the
current time directly, so tests can pin "now" without global state.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    A clock that returns a set instant until told otherwise.

    Example:
        clock = FixedClock(datetime(2026, 3, 1, tzinfo=timezone.utc))
        clock.advance(days=1)
    """

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, days: int = 0, seconds: float = 0) -> None:
        self._instant = self._instant + timedelta(days=days, seconds=seconds)

    def days_before(self, days: int, target: datetime) -> None:
        """Move to `days` days before `target`."""
        self._instant = target - timedelta(days=days)


def today(clock: Clock) -> date:
    return clock.now().date()
