"""
Clock abstraction.

Everything time-dependent in the engine (status resolution, autosave
deadlines, timestamps, monthly reports) asks a Clock for "now" instead of
calling datetime.now() directly, so tests can drive time by hand.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock, local time."""

    def now(self) -> datetime:
        return datetime.now()


class ManualClock:
    """
    A clock that only moves when told to.

    Used by tests to step the autosave task and the status resolver
    through virtual time.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 15, 9, 0, 0)

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._now.date()

    def advance(self, seconds: float = 0.0, **kwargs) -> datetime:
        """Move forward by `seconds` (plus any timedelta kwargs)."""
        self._now = self._now + timedelta(seconds=seconds, **kwargs)
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment
