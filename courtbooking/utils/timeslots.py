"""
Wall-clock helpers shared by the availability, validation and pricing code.

Booking times are stored as naive wall-clock values on a calendar date in the
club's timezone. Blocks are absolute timestamps. Anything compared against a
block is anchored first with ``anchor``.
"""

from datetime import date, datetime, time
from typing import Optional, Union

import pytz

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def to_minutes(t: time) -> int:
    """Minutes since midnight."""
    return t.hour * 60 + t.minute


def from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def parse_time(value: Union[str, time]) -> time:
    """Accept a ``time`` or an ``HH:MM`` / ``HH:MM:SS`` string."""
    if isinstance(value, time):
        return value
    return time.fromisoformat(value)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Half-open interval intersection; touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


def get_timezone(name: str):
    return pytz.timezone(name)


def anchor(day: date, t: time, tz=pytz.utc) -> datetime:
    """Turn a wall-clock time on ``day`` into an aware timestamp in ``tz``."""
    return tz.localize(datetime.combine(day, t))


def ensure_aware(value: datetime, tz=pytz.utc) -> datetime:
    """Attach ``tz`` to naive datetimes (SQLite hands them back without one)."""
    if value.tzinfo is None:
        return tz.localize(value)
    return value


def local_now(tz=pytz.utc, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(pytz.utc)
    return ensure_aware(now).astimezone(tz)


def local_today(tz=pytz.utc, now: Optional[datetime] = None) -> date:
    return local_now(tz, now).date()

