"""Calendar-day helpers shared by availability, booking and revenue logic.

Reservation bounds are inclusive calendar days. Datetimes coming from
clients are pinned to noon in the marketplace timezone before their day is
taken, so a midnight timestamp shifted by a UTC offset never lands on the
neighbouring day.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterator

from .errors import ValidationError

NOON = time(12, 0)


def normalize_to_noon(value: datetime, tz: tzinfo) -> datetime:
    """Return ``value`` moved to ``tz`` (naive means already local) at 12:00."""
    if value.tzinfo is None:
        local = value.replace(tzinfo=tz)
    else:
        local = value.astimezone(tz)
    return datetime.combine(local.date(), NOON, tzinfo=tz)


def parse_calendar_date(value: object, field: str, tz: tzinfo) -> date:
    """Parse a client-supplied day.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and ISO
    8601 datetime strings (``Z`` suffix included).

    Raises:
        ValidationError: If the value is missing or not a date.
    """
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {field}")
    if isinstance(value, datetime):
        return normalize_to_noon(value, tz).date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date for {field}: {value!r}")

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return normalize_to_noon(datetime.fromisoformat(text), tz).date()
    except ValueError:
        raise ValidationError(f"Invalid date for {field}: {value!r}")


def parse_optional_datetime(value: object, field: str, tz: tzinfo) -> datetime | None:
    """Parse an optional ISO datetime; naive values are taken as local time."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid datetime for {field}: {value!r}")
    else:
        raise ValidationError(f"Invalid datetime for {field}: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_time_of_day(value: object, field: str) -> time:
    """Parse ``HH:MM`` (or ``HH:MM:SS``)."""
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {field}")
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid time for {field}: {value!r}")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def expand_date_range(start: date, end: date) -> list[str]:
    """Expand an inclusive range into ``YYYY-MM-DD`` strings.

    >>> expand_date_range(date(2024, 3, 10), date(2024, 3, 12))
    ['2024-03-10', '2024-03-11', '2024-03-12']
    """
    return [day.isoformat() for day in iter_days(start, end)]


def clamp_range(
    start: date, end: date, window_start: date, window_end: date
) -> tuple[date, date]:
    """Clamp ``[start, end]`` to the window."""
    return max(start, window_start), min(end, window_end)


def nights_between(start: date, end: date) -> int:
    """Nights from start to end, end exclusive; never negative."""
    return max(0, (end - start).days)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")
