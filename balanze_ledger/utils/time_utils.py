"""Timestamp helpers shared by ledger ordering rules."""

from datetime import datetime, timezone


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_timestamp(value: datetime | None) -> float:
    """Return a POSIX timestamp, using the epoch for missing values."""
    if value is None:
        return EPOCH.timestamp()
    return ensure_aware(value).timestamp()


__all__ = ["EPOCH", "utc_now", "ensure_aware", "to_timestamp"]
