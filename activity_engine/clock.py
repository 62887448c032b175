"""
Clock abstractions for record timestamps.

Notes
-----
Record creation time is taken from a Clock rather than read directly from the
wall clock, so tests can pin `created_at` to a known value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """A source of epoch-millisecond timestamps."""

    def now_millis(self) -> int:
        """
        Return the current time.

        Returns
        -------
        int
            Milliseconds since the Unix epoch.
        """
        ...


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Clock backed by the system time."""

    def now_millis(self) -> int:
        return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Clock that always returns the same instant (useful for tests)."""

    fixed_millis: int

    def now_millis(self) -> int:
        return self.fixed_millis
