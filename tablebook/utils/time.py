from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from tablebook.config import settings


@lru_cache()
def local_zone() -> ZoneInfo:
    """The restaurant's configured time zone."""
    return ZoneInfo(settings.restaurant_timezone)


def to_local(dt: datetime) -> datetime:
    """Converts a datetime to the local zone; naive values are taken as local wall time."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=local_zone())
    return dt.astimezone(local_zone())


def to_minute(dt: datetime) -> datetime:
    """Localizes and drops seconds, the precision reservations are booked at."""
    return to_local(dt).replace(second=0, microsecond=0)


def db_utc_naive(dt: datetime) -> datetime:
    """Converts a datetime to a naive UTC datetime for DB storage."""
    return to_local(dt).astimezone(timezone.utc).replace(tzinfo=None)


def from_db(dt: datetime) -> datetime:
    """Converts a naive UTC datetime read from the DB back into the local zone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(local_zone())


def parse_local_datetime(s: str) -> datetime:
    """Parses an ISO 8601 local date-time, handling 'Z' for UTC."""
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return to_minute(datetime.fromisoformat(s))


def parse_date(s: str) -> date:
    """Parses a YYYY-MM-DD date."""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def parse_time(s: str) -> time:
    """Parses an HH:MM time."""
    return datetime.strptime(s.strip(), "%H:%M").time()


def combine_local(day: date, at: time) -> datetime:
    return datetime.combine(day, at).replace(tzinfo=local_zone())


def local_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[start, end) of a local calendar day as aware datetimes."""
    start = combine_local(day, time(0, 0))
    end = combine_local(day + timedelta(days=1), time(0, 0))
    return start, end


def display(dt: datetime) -> str:
    """Formats a reservation time for guests, e.g. 'Oct 25, 2025 at 07:30 PM'."""
    return to_local(dt).strftime("%b %d, %Y at %I:%M %p")


class LocalDateTime(TypeDecorator):
    """Stores aware datetimes as naive UTC and loads them in the local zone."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return db_utc_naive(value)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return from_db(value)
