"""
Clock -- injectable source of the current instant.

Order timestamps, status-change times and the anchor of every revenue
window come from ``Clock.now()``.  Services and selectors take a Clock in
their constructor and never read the system time themselves, so a test can
pin "now" to mid-afternoon, step past midnight, or replay a DST boundary.

All instants are timezone-aware UTC.  Conversion to the reporting zone
happens only in ``domain.reporting``.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of the current UTC instant."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time, for production wiring."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests.

    ``now()`` keeps returning the same instant until the test moves it with
    ``advance()`` or ``set_time()``.
    """

    def __init__(self, start: datetime | None = None):
        start = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        if start.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware start")
        self._current = start.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("set_time needs a timezone-aware instant")
        self._current = instant.astimezone(timezone.utc)

    def advance(self, seconds: float = 1) -> datetime:
        """Move forward by ``seconds`` and return the new instant."""
        self._current += timedelta(seconds=seconds)
        return self._current
