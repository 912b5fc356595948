from datetime import timedelta

import pytest

from lfucore.timeutil import (
    AtomicInstant,
    Clock,
    Instant,
    MockClock,
    ensure_expirations,
)

THOUSAND_YEARS = timedelta(seconds=1000 * 365 * 24 * 3600)


def test_instant_now_is_monotonic():
    first = Instant.now()
    second = Instant.now()
    assert first <= second


def test_clock_now_is_monotonic():
    clock = Clock()
    first = clock.now()
    assert clock.now() >= first


def test_checked_add_moves_forward():
    start = Instant.now()
    later = start.checked_add(timedelta(seconds=1))
    assert later > start
    assert later.checked_add(timedelta(0)) == later


def test_checked_add_is_associative():
    start = Instant.now()
    a = start.checked_add(timedelta(seconds=2)).checked_add(timedelta(seconds=3))
    b = start.checked_add(timedelta(seconds=5))
    assert a == b


def test_checked_add_overflow_returns_none():
    near_max = Instant(2**64 - 2)
    assert near_max.checked_add(timedelta(seconds=1)) is None


def test_checked_add_rejects_negative_duration():
    with pytest.raises(ValueError):
        Instant.now().checked_add(timedelta(seconds=-1))


def test_mock_clock_only_moves_on_increment():
    mock = MockClock()
    start = mock.now()
    assert mock.now() == start
    mock.increment(timedelta(seconds=5))
    assert mock.now() == start.checked_add(timedelta(seconds=5))
    mock.increment(timedelta(seconds=5))
    assert mock.now() == start.checked_add(timedelta(seconds=10))


def test_mock_clock_with_explicit_start():
    origin = Instant(0)
    mock = MockClock(origin)
    assert mock.now() == origin
    mock.increment(timedelta(milliseconds=1))
    assert mock.now() == origin.checked_add(timedelta(milliseconds=1))


def test_atomic_instant_default_is_unset():
    holder = AtomicInstant()
    assert holder.is_set() is False
    assert holder.instant() is None


def test_atomic_instant_set_and_reset():
    holder = AtomicInstant()
    now = Instant.now()
    holder.set_instant(now)
    assert holder.is_set() is True
    assert holder.instant() == now
    holder.reset()
    assert holder.is_set() is False
    assert holder.instant() is None


def test_ensure_expirations_accepts_limit():
    ensure_expirations(THOUSAND_YEARS, THOUSAND_YEARS)
    ensure_expirations(None, None)
    assert THOUSAND_YEARS.total_seconds() == 1000 * 365 * 24 * 3600


def test_ensure_expirations_rejects_long_ttl():
    with pytest.raises(ValueError, match="time_to_live is longer than 1000 years"):
        ensure_expirations(THOUSAND_YEARS + timedelta(seconds=1), None)


def test_ensure_expirations_rejects_long_tti():
    with pytest.raises(ValueError, match="time_to_idle is longer than 1000 years"):
        ensure_expirations(None, THOUSAND_YEARS + timedelta(seconds=1))