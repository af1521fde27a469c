"""Tests for the fixed-rate ticker."""

from __future__ import annotations

import asyncio

import pytest

from rollup_harness.harness import Ticker


class TestTicker:
    """Tests for Ticker."""

    async def test_ticks(self) -> None:
        """Each wait returns True once an interval has elapsed."""
        loop = asyncio.get_running_loop()
        ticker = Ticker(0.02, asyncio.Event())

        start = loop.time()
        for _ in range(3):
            assert await ticker.wait()
        assert loop.time() - start >= 0.06 - 0.005

    async def test_stop_before_wait(self) -> None:
        """A set stop event ends the loop without sleeping."""
        stop = asyncio.Event()
        stop.set()
        assert not await Ticker(10.0, stop).wait()

    async def test_stop_interrupts_wait(self) -> None:
        """Stop is observed mid-interval, not at the next tick."""
        stop = asyncio.Event()
        ticker = Ticker(10.0, stop)
        asyncio.get_running_loop().call_later(0.02, stop.set)

        async with asyncio.timeout(1.0):
            assert not await ticker.wait()

    async def test_missed_ticks_are_dropped(self) -> None:
        """A slow iteration does not cause a burst of catch-up ticks."""
        loop = asyncio.get_running_loop()
        ticker = Ticker(0.05, asyncio.Event())

        assert await ticker.wait()
        await asyncio.sleep(0.2)

        # One late tick is delivered at once, then the rate resumes.
        start = loop.time()
        assert await ticker.wait()
        assert loop.time() - start < 0.04

        start = loop.time()
        assert await ticker.wait()
        assert loop.time() - start >= 0.045

    def test_interval_must_be_positive(self) -> None:
        """A zero interval would spin."""
        with pytest.raises(ValueError, match="positive"):
            Ticker(0, asyncio.Event())
