from __future__ import annotations

"""
Clocks for the session engine. Deadlines are whole UNIX seconds; the engine
only ever asks "what time is it now", so tests and simulations drive a
ManualClock while services use the system clock.
"""

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    """Current UNIX time in seconds (int)."""
    return int(time.time())


class ManualClock:
    """A settable clock. Calling the instance returns the current time."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self.now += int(seconds)
        return self.now

    def set(self, ts: int) -> int:
        if ts < self.now:
            raise ValueError("clock cannot move backwards")
        self.now = int(ts)
        return self.now


__all__ = ["Clock", "system_clock", "ManualClock"]
