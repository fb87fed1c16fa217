"""
Async Utilities for Source Fan-Out.

Provides:
- Token bucket rate limiting for per-source request pacing
- Wait-for-all-settled parallel execution with TaskGroup
- A periodic background runner for housekeeping jobs
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Rate Limiter (Token Bucket Algorithm)
# =============================================================================

@dataclass
class RateLimiter:
    """
    Token bucket rate limiter for outgoing source requests.

    Example:
        limiter = RateLimiter(rate=30, per=60.0)  # 30 requests per minute
        async with limiter:
            await fetch_page()
    """
    rate: float = 30.0  # requests per period
    per: float = 60.0   # period in seconds
    _tokens: float = field(init=False)
    _last_update: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self._tokens = self.rate
        self._last_update = time.monotonic()

    async def acquire(self) -> None:
        """Acquire a token, waiting if necessary."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_update
            self._tokens = min(self.rate, self._tokens + elapsed * (self.rate / self.per))
            self._last_update = now

            if self._tokens < 1:
                wait_time = (1 - self._tokens) * (self.per / self.rate)
                logger.debug(f"Rate limit: waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._last_update = time.monotonic()
                self._tokens = 0
            else:
                self._tokens -= 1

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


# =============================================================================
# Parallel Execution with TaskGroup (Python 3.11+)
# =============================================================================

async def gather_settled[T](*coros: Awaitable[T]) -> list[T | Exception]:
    """
    Run coroutines concurrently and wait for every one of them to settle.

    No fail-fast: an exception raised by one coroutine is captured as a value
    in its slot and never cancels its siblings. Results keep the order of
    ``coros`` regardless of completion order.

    Example:
        outcomes = await gather_settled(source_a.search(q), source_b.search(q))
        for outcome in outcomes:
            if isinstance(outcome, Exception):
                ...
    """
    results: list[T | Exception | None] = [None] * len(coros)

    async def safe_run(coro: Awaitable[T], index: int) -> None:
        try:
            results[index] = await coro
        except Exception as e:
            results[index] = e

    async with asyncio.TaskGroup() as tg:
        for i, coro in enumerate(coros):
            tg.create_task(safe_run(coro, i))

    return results  # type: ignore[return-value]


# =============================================================================
# Periodic Background Job
# =============================================================================

class PeriodicTask:
    """
    Run a synchronous job on a fixed cadence in the running event loop.

    The job runs independently of request traffic. Exceptions from the job
    are logged and the schedule continues.

    Example:
        sweeper = PeriodicTask(cache.cleanup, interval=600, name="cache-cleanup")
        sweeper.start()
        ...
        await sweeper.stop()
    """

    def __init__(self, job: Callable[[], Any], interval: float, name: str = "periodic") -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._job = job
        self._interval = interval
        self._name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop. Calling start() on a running task is a no-op."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._job()
            except Exception as e:
                logger.error(f"{self._name} job failed: {e}")
