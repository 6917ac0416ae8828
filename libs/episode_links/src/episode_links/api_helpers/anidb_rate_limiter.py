"""AniDB request rate limiting utilities.

This module provides a process-wide shared async rate limiter used by all AniDB
API calls. AniDB bans clients per outbound IP, so every request in the process,
from any helper instance, must be scheduled through the same limiter.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import TypeVar

from episode_links.config import get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AniDBRateLimiter:
    """Asynchronous serializing rate limiter for AniDB requests.

    Scheduled tasks run one at a time, in FIFO order, and their *start times*
    are spaced at least ``min_interval_seconds`` apart. The limiter is held for
    the whole duration of a task, so a slow request delays the next one.

    The limiter is safe to share across tasks in a single process.

    Args:
        min_interval_seconds: Minimum spacing between task starts.
        warmup_seconds: One-time delay before the very first task.
        clock: Monotonic time source, overridable for tests.
    """

    def __init__(
        self,
        *,
        min_interval_seconds: float = 2.25,
        warmup_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval = float(min_interval_seconds)
        self._warmup = float(warmup_seconds)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last: float | None = None
        self._running = 0
        self._queued = 0
        self._warmed_up = self._warmup <= 0

    @property
    def running(self) -> int:
        """Number of tasks currently executing (0 or 1)."""
        return self._running

    @property
    def queued(self) -> int:
        """Number of callers waiting for admission."""
        return self._queued

    @property
    def last_dispatch(self) -> float | None:
        """Clock reading at the start of the most recent task."""
        return self._last

    async def _wait_for_slot(self) -> None:
        if not self._warmed_up:
            logger.info(f"AniDB warm-up: waiting {self._warmup:.2f}s before first request")
            await asyncio.sleep(self._warmup)
            self._warmed_up = True

        now = self._clock()
        if self._last is not None and self._min_interval > 0:
            sleep_for = (self._last + self._min_interval) - now
            if sleep_for > 0:
                logger.debug(f"AniDB rate limiting: waiting {sleep_for:.2f}s")
                await asyncio.sleep(sleep_for)
                now = self._clock()

        self._last = now

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` once the limiter admits it and return its result.

        Callers suspend cooperatively until every earlier caller has finished
        and the minimum interval since the previous start has elapsed.
        Exceptions raised by ``task`` propagate unchanged.

        Args:
            task: Zero-argument callable returning an awaitable.

        Returns:
            Whatever ``task`` returns.
        """
        self._queued += 1
        try:
            await self._lock.acquire()
        finally:
            self._queued -= 1

        try:
            await self._wait_for_slot()
            self._running += 1
            try:
                return await task()
            finally:
                self._running -= 1
        finally:
            self._lock.release()


@lru_cache(maxsize=1)
def get_shared_anidb_rate_limiter() -> AniDBRateLimiter:
    """Return a process-wide shared limiter instance for all AniDB requests.

    This is the default limiter used by `AniDBClient` unless explicitly
    overridden. Interval and warm-up come from `get_config()`.

    Returns:
        AniDBRateLimiter: A singleton limiter for the current Python process.
    """
    config = get_config()
    return AniDBRateLimiter(
        min_interval_seconds=config.anidb_min_interval_seconds,
        warmup_seconds=config.effective_warmup_seconds,
    )
