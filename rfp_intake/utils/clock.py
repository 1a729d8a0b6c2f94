"""Time helpers."""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return UTC now as a naive datetime.

    Stored timestamps are naive UTC so that SQLite and PostgreSQL compare
    them the same way.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def seconds_from(now: datetime, seconds: float) -> datetime:
    """Shift ``now`` by a (possibly fractional) number of seconds."""
    return now + timedelta(seconds=seconds)
