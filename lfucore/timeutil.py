"""Monotonic instants, clocks and expiration limits."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

_NANOS_PER_SECOND = 1_000_000_000
_MAX_NANOS = 2**64 - 1
_YEAR_SECONDS = 365 * 24 * 3600
_MAX_EXPIRATION = timedelta(seconds=1_000 * _YEAR_SECONDS)


def _duration_nanos(duration: timedelta) -> int:
    if duration < timedelta(0):
        raise ValueError("duration must not be negative")
    return (duration.days * 86_400 + duration.seconds) * _NANOS_PER_SECOND + (
        duration.microseconds * 1_000
    )


@dataclass(frozen=True, order=True)
class Instant:
    """A point on a monotonic timeline, in nanoseconds."""

    nanos: int

    @staticmethod
    def now() -> "Instant":
        return Instant(time.monotonic_ns())

    def checked_add(self, duration: timedelta) -> Optional["Instant"]:
        """Return this instant moved forward by ``duration``, or None on overflow."""
        total = self.nanos + _duration_nanos(duration)
        if total > _MAX_NANOS:
            return None
        return Instant(total)


class Clock:
    """A clock reading the system's monotonic time."""

    def now(self) -> Instant:
        return Instant.now()


class MockClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, start: Optional[Instant] = None) -> None:
        self._current = start if start is not None else Instant.now()
        self._lock = threading.Lock()

    def now(self) -> Instant:
        with self._lock:
            return self._current

    def increment(self, duration: timedelta) -> None:
        with self._lock:
            moved = self._current.checked_add(duration)
            if moved is None:
                raise OverflowError("mock clock overflowed")
            self._current = moved


class AtomicInstant:
    """A thread-safe holder of an optional instant."""

    def __init__(self) -> None:
        self._instant: Optional[Instant] = None
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self._instant = None

    def is_set(self) -> bool:
        with self._lock:
            return self._instant is not None

    def instant(self) -> Optional[Instant]:
        with self._lock:
            return self._instant

    def set_instant(self, instant: Instant) -> None:
        with self._lock:
            self._instant = instant


def ensure_expirations(
    time_to_live: Optional[timedelta], time_to_idle: Optional[timedelta]
) -> None:
    """Raise ValueError if either expiration is longer than 1000 years."""
    if time_to_live is not None and time_to_live > _MAX_EXPIRATION:
        raise ValueError("time_to_live is longer than 1000 years")
    if time_to_idle is not None and time_to_idle > _MAX_EXPIRATION:
        raise ValueError("time_to_idle is longer than 1000 years")