"""Time-of-day helpers. Times are minutes since midnight; 24:00 is 1440."""

import re
from datetime import date, datetime, timedelta

from courtslot.errors import ValidationError

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^([01]?\d|2[0-4]):([0-5]\d)$")


def parse_hhmm(value: str, *, allow_midnight_end: bool = False) -> int:
    """Parse ``HH:MM`` into minutes since midnight.

    ``24:00`` is only accepted when ``allow_midnight_end`` is set, since it can
    close a day but never open a slot.
    """
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValidationError(f"Time must be in HH:MM format, got {value!r}", field="time")
    hours, minutes = int(match.group(1)), int(match.group(2))
    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY or (total == MINUTES_PER_DAY and not allow_midnight_end):
        raise ValidationError(f"Time out of range: {value!r}", field="time")
    return total


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def at_minute(day: date, minutes: int) -> datetime:
    """Naive local datetime for ``minutes`` past midnight on ``day``."""
    return datetime.combine(day, datetime.min.time()) + timedelta(minutes=minutes)


def minute_of(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute
