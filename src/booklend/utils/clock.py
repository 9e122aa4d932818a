"""UTC clock helpers.

Loan timestamps are stored as naive UTC datetimes and "today" is always the
UTC calendar date.
"""

from datetime import date, datetime, time, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalise an aware or naive datetime to naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(day: date) -> datetime:
    """Midnight (naive UTC) at the start of ``day``."""
    return datetime.combine(day, time.min)
