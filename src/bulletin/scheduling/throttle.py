"""Rate limiting for opportunistic sweeps.

Sweeps are triggered on admin page loads as well as by timers, far more
often than they are useful. ThrottledScheduler lets at most one sweep
through per interval; calls inside the window return a skipped result
without touching storage.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime

from bulletin.scheduling.sweep import Scheduler
from bulletin.scheduling.types import LastRunStore, SweepResult

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class InMemoryLastRunStore:
    """Process-local last-run time guarded by an asyncio lock."""

    def __init__(self) -> None:
        self._value: float | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> float | None:
        async with self._lock:
            return self._value

    async def set(self, value: float) -> None:
        async with self._lock:
            self._value = value

    async def reset(self) -> None:
        async with self._lock:
            self._value = None


class ThrottledScheduler:
    """Wraps a Scheduler so sweeps run at most once per interval.

    Example:
        throttled = ThrottledScheduler(Scheduler(store), interval_seconds=60)
        result = await throttled.maybe_run(datetime.now(UTC))
        if result.skipped:
            ...  # inside the window, nothing was read
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        last_run: LastRunStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scheduler = scheduler
        self._interval = interval_seconds
        self._last_run = last_run if last_run is not None else InMemoryLastRunStore()
        self._clock = clock
        # Serializes check-and-run so concurrent callers can't both pass the gate
        self._gate = asyncio.Lock()

    @property
    def last_run(self) -> LastRunStore:
        return self._last_run

    @property
    def interval_seconds(self) -> float:
        return self._interval

    async def maybe_run(self, now: datetime, *, force: bool = False) -> SweepResult:
        """Run a sweep unless one completed within the interval.

        Args:
            now: Wall-clock time the sweep compares schedule fields against.
            force: Ignore the throttle window.
        """
        async with self._gate:
            started = self._clock()
            last = await self._last_run.get()
            if not force and last is not None and started - last < self._interval:
                logger.debug(
                    "sweep_throttled",
                    extra={"sweep.seconds_since_last": round(started - last, 3)},
                )
                return SweepResult.skipped_result()

            result = await self._scheduler.run_sweep(now)
            await self._last_run.set(self._clock())
            return result

    async def reset(self) -> None:
        """Forget the last run so the next call sweeps immediately."""
        await self._last_run.reset()
