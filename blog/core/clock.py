from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def advance(previous: datetime) -> datetime:
    """Current time, strictly later than previous"""
    now = utcnow()
    previous = as_utc(previous)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now
