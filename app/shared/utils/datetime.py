"""
UTC datetime helpers.

Stored timestamps are timezone-aware UTC; use these instead of
datetime.now() or datetime.utcnow().
"""

from datetime import UTC, date, datetime, time


def utc_now() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime to aware UTC.

    Naive values are taken to be UTC already; aware values are converted.
    None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def start_of_day_utc(day: date) -> datetime:
    """00:00:00 UTC on day."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day_utc(day: date) -> datetime:
    """Last representable instant (23:59:59.999999 UTC) of day.

    Used for inclusive "to" date filters.
    """
    return datetime.combine(day, time.max, tzinfo=UTC)
