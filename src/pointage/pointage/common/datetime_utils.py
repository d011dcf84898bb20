from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Union

DayLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def to_iso_timestamp(value: datetime) -> str:
    """Format a datetime the way stored records carry it: 2024-01-10T08:30:00.000Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def _parse_iso_datetime(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_day_key(value: DayLike) -> str:
    """Normalize a date, datetime or ISO string to the YYYY-MM-DD day it falls on (UTC).

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return parse_iso_date(text).isoformat()
        try:
            return to_day_key(_parse_iso_datetime(text))
        except ValueError as exc:
            raise ValueError(f"Invalid date value: {value!r}") from exc
    raise TypeError(f"Unsupported date value type: {type(value)!r}")


def iter_day_keys(start: DayLike, end: DayLike) -> Iterator[str]:
    """Yield every day key from start to end, both inclusive."""
    current = parse_iso_date(to_day_key(start))
    last = parse_iso_date(to_day_key(end))
    while current <= last:
        yield current.isoformat()
        current += timedelta(days=1)
