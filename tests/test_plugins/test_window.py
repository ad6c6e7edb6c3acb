"""Tests for the order-preserving concurrency window."""

import asyncio

import pytest

from plugdex.plugins.window import ordered_window


async def _jobs(delays, tracker=None):
    """Yield jobs that sleep for the given delays and return their index."""
    for index, delay in enumerate(delays):

        async def job(index=index, delay=delay):
            if tracker is not None:
                tracker["active"] += 1
                tracker["peak"] = max(tracker["peak"], tracker["active"])
            try:
                await asyncio.sleep(delay)
                return index
            finally:
                if tracker is not None:
                    tracker["active"] -= 1

        yield job


class TestOrderedWindow:
    """Test ordered_window() semantics."""

    @pytest.mark.asyncio
    async def test_preserves_submission_order(self):
        delays = [0.05, 0.01, 0.03, 0.0, 0.02]

        results = [r async for r in ordered_window(_jobs(delays), limit=3)]

        assert results == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 2, 4, 16])
    async def test_order_independent_of_limit(self, limit):
        delays = [0.02, 0.0, 0.01, 0.03, 0.0, 0.01]

        results = [r async for r in ordered_window(_jobs(delays), limit=limit)]

        assert results == list(range(len(delays)))

    @pytest.mark.asyncio
    async def test_limit_bounds_in_flight_jobs(self):
        tracker = {"active": 0, "peak": 0}

        results = [
            r async for r in ordered_window(_jobs([0.01] * 10, tracker), limit=3)
        ]

        assert len(results) == 10
        assert tracker["peak"] == 3

    @pytest.mark.asyncio
    async def test_jobs_run_concurrently(self):
        loop = asyncio.get_running_loop()
        start = loop.time()

        results = [r async for r in ordered_window(_jobs([0.2] * 4), limit=4)]

        assert len(results) == 4
        assert loop.time() - start < 0.6

    @pytest.mark.asyncio
    async def test_empty_source(self):
        assert [r async for r in ordered_window(_jobs([]), limit=2)] == []

    @pytest.mark.asyncio
    async def test_invalid_limit(self):
        with pytest.raises(ValueError):
            async for _ in ordered_window(_jobs([0.0]), limit=0):
                pass

    @pytest.mark.asyncio
    async def test_job_error_propagates(self):
        async def failing_jobs():
            async def boom():
                raise RuntimeError("boom")

            yield boom

        with pytest.raises(RuntimeError, match="boom"):
            async for _ in ordered_window(failing_jobs(), limit=2):
                pass

    @pytest.mark.asyncio
    async def test_early_close_cancels_pending(self):
        tracker = {"active": 0, "peak": 0}
        window = ordered_window(_jobs([0.0, 5.0, 5.0], tracker), limit=3)

        assert await anext(window) == 0
        await asyncio.wait_for(window.aclose(), timeout=1)

        assert tracker["active"] == 0
