# Overview: UTC clock, ISO-8601 parsing/serialization and day boundaries.

"""
Time helpers

Every timestamp column stores UTC without tzinfo. Anything coming in with an
offset is converted; anything naive is taken to already be UTC.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

_DATE_ONLY_LENGTH = len("YYYY-MM-DD")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def parse_iso_datetime(value: Optional[str], end_of_range: bool = False) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into a UTC-naive datetime.

    A bare date ("2026-03-01") means midnight, or the last microsecond of
    that day when end_of_range is set, so "?end_date=2026-03-01" includes
    the whole day. A trailing "Z" is accepted. Raises ValueError on garbage.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    if len(text) == _DATE_ONLY_LENGTH:
        day = date.fromisoformat(text)
        return end_of_day(day) if end_of_range else start_of_day(day)

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _as_utc_naive(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as "YYYY-MM-DDTHH:MM:SSZ" (seconds precision)."""
    if dt is None:
        return None
    return _as_utc_naive(dt).replace(microsecond=0).isoformat() + "Z"


def to_epoch_micros(dt: datetime) -> int:
    """Microseconds since the epoch; exact, unlike float timestamp()."""
    delta = _as_utc_naive(dt) - datetime(1970, 1, 1)
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def days_back(now: datetime, days: int) -> list[date]:
    """The `days` calendar days ending with now's day, oldest first."""
    last = now.date()
    return [last - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
