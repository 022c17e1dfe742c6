from datetime import UTC, datetime, timedelta

from src.adapters.clock import FixedClock, SystemClock


def test_system_clock():
    clock = SystemClock()
    now = clock.now_utc()
    assert now.tzinfo is not None
    diff = abs((datetime.now(UTC) - now).total_seconds())
    assert diff < 1.0


def test_fixed_clock_advances():
    start = datetime(2025, 1, 1, tzinfo=UTC)
    clock = FixedClock(start)
    assert clock.now_utc() == start
    assert clock.advance(hours=1, minutes=30) == start + timedelta(hours=1, minutes=30)
    assert clock.now_utc() == start + timedelta(hours=1, minutes=30)


def test_fixed_clock_assumes_utc_for_naive():
    clock = FixedClock(datetime(2025, 1, 1))
    assert clock.now_utc().tzinfo == UTC
