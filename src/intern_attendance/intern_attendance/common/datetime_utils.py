from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str):
        raise ValidationError(f"Tanggal tidak valid: {value!r} (format YYYY-MM-DD)")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Tanggal tidak valid: {value!r} (format YYYY-MM-DD)")


def parse_timestamp(value: str, tz: ZoneInfo) -> datetime:
    """Parse an ISO-8601 instant into an aware datetime.

    A trailing ``Z`` is accepted. Naive values are interpreted in the site timezone.
    """

    if not isinstance(value, str):
        raise ValidationError(f"Timestamp tidak valid: {value!r}")
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Timestamp tidak valid: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def now_local(tz: ZoneInfo) -> datetime:
    """Current time in the site timezone.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(tz)


def to_site(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetime -> naive UTC, the form stored in DATETIME columns."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def iter_days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def format_hhmm(value: datetime, tz: ZoneInfo) -> str:
    return to_site(value, tz).strftime("%H:%M")
