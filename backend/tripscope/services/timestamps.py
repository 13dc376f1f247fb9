"""Timestamp helpers: coerce row timestamps to aware UTC datetimes."""

from datetime import date, datetime, timedelta, timezone

SECONDS_PER_DAY = 86400


def to_utc(value: datetime | str) -> datetime:
    """Coerce a datetime or ISO-8601 string to an aware UTC datetime.

    Naive values are taken to be UTC. A trailing "Z" is accepted.
    Raises ValueError for strings that are not ISO-8601.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_now(now: datetime | str | None) -> datetime:
    """Explicit reference time if given, else the wall clock."""
    return utc_now() if now is None else to_utc(now)


def week_start(moment: datetime) -> date:
    """Sunday that starts the week containing `moment` (UTC)."""
    day = moment.date()
    # isoweekday: Mon=1 .. Sun=7
    return day - timedelta(days=day.isoweekday() % 7)


def start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from `earlier` to `later`, floored."""
    return int((later - earlier).total_seconds() // SECONDS_PER_DAY)
