"""Sources of the current time"""

from datetime import datetime, timedelta
from typing import Protocol

from tablebook.utils.time import local_zone, to_local


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in the restaurant's zone"""

    def now(self) -> datetime:
        return datetime.now(local_zone()).replace(microsecond=0)


class FixedClock:
    """A clock that only moves when told to"""

    def __init__(self, at: datetime):
        self._now = to_local(at)

    def now(self) -> datetime:
        return self._now

    def set(self, at: datetime) -> None:
        self._now = to_local(at)

    def advance(self, delta: timedelta) -> None:
        self._now = self._now + delta
