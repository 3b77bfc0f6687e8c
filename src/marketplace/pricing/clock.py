"""Timezone handling for offer and promotion windows."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so stored and request times compare safely."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def within_window(now: datetime, start_at: datetime | None, end_at: datetime | None) -> bool:
    """True when ``now`` falls inside the window; a missing bound is open."""
    now = as_utc(now)
    start_at, end_at = as_utc(start_at), as_utc(end_at)
    if start_at is not None and start_at > now:
        return False
    if end_at is not None and end_at < now:
        return False
    return True
