"""Tests for async_utils.py: RateLimiter, gather_settled, PeriodicTask."""

import asyncio

import pytest

from tab_search.core.async_utils import PeriodicTask, RateLimiter, gather_settled


# ============================================================
# RateLimiter
# ============================================================

class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_acquire_fast(self):
        rl = RateLimiter(rate=10.0, per=1.0)
        await rl.acquire()  # Should not block

    @pytest.mark.asyncio
    async def test_context_manager(self):
        rl = RateLimiter(rate=10.0)
        async with rl:
            pass

    @pytest.mark.asyncio
    async def test_waits_when_drained(self, monkeypatch):
        sleeps: list[float] = []

        async def fake_sleep(delay):
            sleeps.append(delay)

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)
        rl = RateLimiter(rate=2.0, per=60.0)
        for _ in range(3):
            await rl.acquire()
        assert len(sleeps) == 1
        assert sleeps[0] > 0


# ============================================================
# gather_settled
# ============================================================

class TestGatherSettled:
    @pytest.mark.asyncio
    async def test_keeps_input_order(self):
        async def delayed(value, delay):
            await asyncio.sleep(delay)
            return value

        results = await gather_settled(delayed("slow", 0.05), delayed("fast", 0))
        assert results == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(self):
        finished = []

        async def boom():
            raise ValueError("boom")

        async def slow_ok():
            await asyncio.sleep(0.02)
            finished.append(True)
            return "ok"

        results = await gather_settled(boom(), slow_ok())
        assert isinstance(results[0], ValueError)
        assert results[1] == "ok"
        assert finished == [True]

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await gather_settled() == []


# ============================================================
# PeriodicTask
# ============================================================

class TestPeriodicTask:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            PeriodicTask(lambda: None, interval=0)

    @pytest.mark.asyncio
    async def test_runs_job_repeatedly(self):
        calls = []
        task = PeriodicTask(lambda: calls.append(1), interval=0.01)
        task.start()
        await asyncio.sleep(0.06)
        await task.stop()
        assert len(calls) >= 2
        assert not task.running

    @pytest.mark.asyncio
    async def test_job_errors_do_not_stop_schedule(self):
        calls = []

        def flaky():
            calls.append(1)
            raise RuntimeError("sweep failed")

        task = PeriodicTask(flaky, interval=0.01)
        task.start()
        await asyncio.sleep(0.06)
        await task.stop()
        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        task = PeriodicTask(lambda: None, interval=10)
        task.start()
        first = task._task
        task.start()
        assert task._task is first
        await task.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        await PeriodicTask(lambda: None, interval=1).stop()
