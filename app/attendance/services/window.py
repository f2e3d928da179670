from __future__ import annotations

from datetime import datetime, timedelta

from django.utils import timezone


def window_bounds(start: datetime, end: datetime, grace_minutes: int) -> tuple[datetime, datetime]:
    grace = timedelta(minutes=grace_minutes or 0)
    return start - grace, end + grace


def is_within_window(start: datetime, end: datetime, grace_minutes: int, now: datetime | None = None) -> bool:
    """Return True when ``now`` lies in [start - grace, end + grace].

    An inverted window (end before start) never contains anything, whatever
    the grace period.
    """
    if end < start:
        return False
    if now is None:
        now = timezone.now()
    opens_at, closes_at = window_bounds(start, end, grace_minutes)
    return opens_at <= now <= closes_at
