"""
First-error aggregation for concurrent tasks.

Both concurrent tasks report into one aggregator. Only the first report
is kept; it becomes the run's failure cause. Reports that arrive after
the first one, or after the controller has decided the run, are dropped.
"""

from __future__ import annotations

import asyncio
import logging

from rollup_harness.errors import HarnessError

logger = logging.getLogger(__name__)


class ErrorAggregator:
    """
    A write-once slot for the run's failure cause.

    `report` never blocks, so a failing task can always hand off its error
    and exit. All access happens on the event loop thread.
    """

    def __init__(self) -> None:
        self._error: HarnessError | None = None
        self._closed = False
        self._arrived = asyncio.Event()
        self.dropped: list[HarnessError] = []
        """Reports that lost the race, kept for diagnostics."""

    @property
    def first_error(self) -> HarnessError | None:
        """The accepted error, if any."""
        return self._error

    @property
    def closed(self) -> bool:
        """Whether the controller has stopped accepting reports."""
        return self._closed

    def report(self, error: HarnessError) -> bool:
        """
        Offer an error.

        Returns:
            True if this error was accepted as the failure cause.
        """
        if self._closed or self._error is not None:
            self.dropped.append(error)
            logger.debug("Discarding error reported after the first: %s", error)
            return False

        self._error = error
        self._arrived.set()
        logger.debug("Accepted failure cause: %s", error)
        return True

    async def wait(self) -> HarnessError:
        """Block until an error has been accepted and return it."""
        await self._arrived.wait()
        assert self._error is not None
        return self._error

    def close(self) -> None:
        """Stop accepting reports. Later reports are dropped."""
        self._closed = True
