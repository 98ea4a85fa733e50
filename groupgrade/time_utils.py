"""UTC helpers shared by the models and the scoring services."""

from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Convert a datetime to UTC; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(value: date) -> datetime:
    """Midnight UTC of the given date."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)
