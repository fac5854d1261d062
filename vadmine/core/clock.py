"""Wall-clock access and elapsed-time helpers shared by all accrual logic."""

from datetime import datetime, timedelta, timezone
from typing import Protocol

DAY = timedelta(hours=24)
DAY_SECONDS = int(DAY.total_seconds())


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """Attach UTC to naive timestamps (Mongo hands those back unless tz_aware)."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def elapsed_seconds(start: datetime, now: datetime) -> int:
    """Whole seconds from start to now, never negative (clock skew clamps to 0)."""
    delta = ensure_utc(now) - ensure_utc(start)
    return max(0, int(delta.total_seconds()))


def capped_elapsed_seconds(start: datetime, now: datetime, cap_seconds: int = DAY_SECONDS) -> int:
    return min(elapsed_seconds(start, now), cap_seconds)


def window_elapsed(last: datetime | None, now: datetime, window: timedelta = DAY) -> bool:
    """True if there is no previous stamp or at least `window` has passed since it."""
    if last is None:
        return True
    return ensure_utc(now) - ensure_utc(last) >= window


def remaining_until(last: datetime | None, now: datetime, window: timedelta = DAY) -> timedelta:
    if last is None:
        return timedelta(0)
    remaining = ensure_utc(last) + window - ensure_utc(now)
    return max(remaining, timedelta(0))
