"""
Time helpers shared by the moderation and activity services.
"""

from datetime import datetime, timedelta, timezone

ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Make a datetime timezone-aware.

    SQLite hands back naive datetimes for values that were stored as UTC, so
    naive values are assumed to be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end (floored)."""
    return (ensure_utc(end) - ensure_utc(start)) // ONE_MS


def format_cooldown(milliseconds: int) -> str:
    """
    Format a remaining wait as minutes and seconds.

    Examples:
        >>> format_cooldown(1_200_000)
        '20m 0s'
        >>> format_cooldown(61_999)
        '1m 1s'
    """
    minutes = milliseconds // 60_000
    seconds = (milliseconds % 60_000) // 1000
    return f"{minutes}m {seconds}s"


def window_start(window: str, now: datetime | None = None) -> datetime | None:
    """
    Start of an admin date filter window.

    Args:
        window: "today", "week", "month" or "all"
        now: Reference time (defaults to the current time)

    Returns:
        Inclusive lower bound, or None for "all" and unknown windows
    """
    now = ensure_utc(now or utc_now())
    if window == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == "week":
        return now - timedelta(days=7)
    if window == "month":
        return now - timedelta(days=30)
    return None
