"""Clocks supplying the engine's notion of "now"."""

import time

from cdp_engine.data.interfaces import Clock


class SystemClock(Clock):
    """Wall-clock seconds since the epoch."""

    def now(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """Clock advanced explicitly, for simulations and tests."""

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"cannot move the clock backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError(f"cannot move the clock backwards to {timestamp}")
        self._now = timestamp
