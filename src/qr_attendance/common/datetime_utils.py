from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..core.constants import DAY_KEY_FORMAT


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (the DB driver returns naive UTC values)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db(value: datetime | None) -> datetime | None:
    """Naive UTC datetime for DATETIME columns."""
    if value is None:
        return None
    return as_utc(value).replace(tzinfo=None)


def reference_timezone(offset_hours: int) -> timezone:
    return timezone(timedelta(hours=offset_hours))


def day_key(instant: datetime, tz: timezone) -> str:
    """Calendar day (YYYY-MM-DD) of `instant` in the institution's fixed timezone.

    The key bounds duplicate check-ins to one per day, so it must never depend
    on the caller's local time.
    """
    return as_utc(instant).astimezone(tz).strftime(DAY_KEY_FORMAT)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string (a trailing 'Z' is accepted) into an aware UTC datetime."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))
