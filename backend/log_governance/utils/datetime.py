from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as naive UTC (the form MongoDB hands back)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def ensure_naive_utc(dt_value: datetime | None) -> datetime | None:
    """
    Ensure a datetime is naive UTC.

    Useful when comparing caller-supplied datetimes with values read
    back from the database, which are stored as naive UTC.
    """
    if dt_value is None:
        return None

    if isinstance(dt_value, datetime):
        if dt_value.tzinfo is not None:
            return dt_value.astimezone(timezone.utc).replace(tzinfo=None)
        return dt_value

    return None
