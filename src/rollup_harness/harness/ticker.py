"""
Fixed-rate ticks that give way to a cancellation signal.

Every concurrent task in the harness waits on one of these between
iterations, so a shutdown request is observed within one tick interval.
"""

from __future__ import annotations

import asyncio


class Ticker:
    """
    Fires every `interval` seconds until `stop` is set.

    Ticks are scheduled at a fixed rate from the first wait. Ticks missed
    while the caller was busy are dropped rather than delivered in a burst.
    """

    def __init__(self, interval: float, stop: asyncio.Event) -> None:
        if interval <= 0:
            raise ValueError(f"tick interval must be positive, got {interval}")
        self.interval = interval
        self.stop = stop
        self._next: float | None = None

    async def wait(self) -> bool:
        """
        Sleep until the next tick.

        Returns:
            True when the tick elapsed, False when `stop` fired first.
        """
        if self.stop.is_set():
            return False

        loop = asyncio.get_running_loop()
        if self._next is None:
            self._next = loop.time() + self.interval

        delay = max(0.0, self._next - loop.time())
        try:
            await asyncio.wait_for(self.stop.wait(), timeout=delay)
            return False
        except TimeoutError:
            pass

        now = loop.time()
        self._next += self.interval
        if self._next <= now:
            self._next = now + self.interval
        return True
