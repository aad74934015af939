"""Date helpers. Every timestamp mnemo handles is timezone-aware UTC."""

from datetime import date, datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_date(value: datetime | date) -> date:
    """Normalize a timestamp (or date) to its UTC calendar date."""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def to_date_string(value: datetime | date) -> str:
    return to_utc_date(value).isoformat()


def days_between(start: date, end: date) -> int:
    return (end - start).days


def start_of_day(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)
