from datetime import datetime, timedelta, timezone

from vadmine.core.clock import (
    DAY_SECONDS,
    capped_elapsed_seconds,
    elapsed_seconds,
    ensure_utc,
    remaining_until,
    window_elapsed,
)

from conftest import T0


def test_elapsed_seconds_floors_and_clamps():
    assert elapsed_seconds(T0, T0 + timedelta(seconds=90, milliseconds=999)) == 90
    assert elapsed_seconds(T0, T0 - timedelta(minutes=5)) == 0


def test_capped_elapsed_seconds():
    assert capped_elapsed_seconds(T0, T0 + timedelta(hours=3)) == 3 * 3600
    assert capped_elapsed_seconds(T0, T0 + timedelta(days=3)) == DAY_SECONDS


def test_ensure_utc_naive_and_offset():
    naive = datetime(2026, 3, 2, 8, 0, 0)
    assert ensure_utc(naive) == T0
    plus_two = datetime(2026, 3, 2, 10, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(plus_two) == T0
    assert ensure_utc(plus_two).tzinfo == timezone.utc


def test_window_elapsed():
    assert window_elapsed(None, T0)
    assert not window_elapsed(T0, T0 + timedelta(hours=23, minutes=59))
    assert window_elapsed(T0, T0 + timedelta(hours=24))


def test_remaining_until():
    assert remaining_until(None, T0) == timedelta(0)
    assert remaining_until(T0, T0 + timedelta(hours=20)) == timedelta(hours=4)
    assert remaining_until(T0, T0 + timedelta(hours=30)) == timedelta(0)
