"""Time providers.

The pool never reads the wall clock directly. It calls an injected
`clock()` returning integer epoch seconds, the equivalent of a block
timestamp. Tests use ManualClock to move time forward the way a local chain
would mine a block at a chosen timestamp.
"""

import time


class SystemClock:
    """Current wall-clock time in whole seconds."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to.

    Example:
        clock = ManualClock(launch_time)
        pool = VestingPool(token, launch_time, authority, clock=clock)
        clock.advance(UNIT_VESTING_INTERVAL)
    """

    def __init__(self, now: int = 0):
        self.now = int(now)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"Cannot move clock backwards by {seconds} seconds")
        self.now += int(seconds)
        return self.now

    def set(self, timestamp: int) -> int:
        """Jump to an absolute timestamp (may be earlier than the current one)."""
        self.now = int(timestamp)
        return self.now
