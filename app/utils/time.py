"""Time utilities (UTC)."""

from datetime import date, datetime, timezone


def now_utc_naive() -> datetime:
    """
    Current time in UTC, returned as naive datetime for DB storage.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def to_utc_iso_db(dt: datetime) -> str:
    """
    DB timestamps are stored as naive UTC; attach the offset for API output.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
