from datetime import datetime, time, timedelta, timezone

from ..core.constants import HHMM_REGEX


def is_hhmm(value: str) -> bool:
    """True for zero-padded 24-hour ``HH:MM`` strings."""
    return bool(HHMM_REGEX.fullmatch(value))


def time_to_hhmm(t: time) -> str:
    """Always return HH:MM format"""
    return t.strftime("%H:%M")


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_day_of_week(value: datetime) -> int:
    """Day of week in UTC with Sunday=0 ... Saturday=6."""
    # datetime.weekday() is Monday=0 ... Sunday=6
    return (ensure_utc(value).weekday() + 1) % 7


def utc_hhmm(value: datetime) -> str:
    return time_to_hhmm(ensure_utc(value).time())


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)
