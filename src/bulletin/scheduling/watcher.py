"""Sweep watcher: runs the publish/takedown sweep on a timer.

The watcher owns the polling loop and a registry of result handlers. The
throttle still applies, so a watcher and opportunistic page-load sweeps can
share one ThrottledScheduler without doubling the work.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from bulletin.scheduling.throttle import ThrottledScheduler
from bulletin.scheduling.types import SweepResult

logger = logging.getLogger(__name__)

SweepHandler = Callable[[SweepResult], Awaitable[Any]]

# Heartbeat log every this many polls
HEARTBEAT_INTERVAL = 60


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SweepWatcher:
    """Polls the throttled scheduler until stopped.

    Example:
        watcher = SweepWatcher(ThrottledScheduler(Scheduler(store)))

        @watcher.on_sweep
        async def report(result):
            ...

        await watcher.start()
    """

    def __init__(
        self,
        scheduler: ThrottledScheduler,
        poll_interval: float = 15.0,
        now: Callable[[], datetime] = _utc_now,
    ):
        self._scheduler = scheduler
        self._poll_interval = poll_interval
        self._now = now
        self._handlers: list[SweepHandler] = []
        self._running = False
        self._task: asyncio.Task | None = None
        self._poll_count = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def poll_count(self) -> int:
        return self._poll_count

    def on_sweep(self, handler: SweepHandler) -> SweepHandler:
        """Decorator to register a handler for non-skipped sweep results."""
        self._handlers.append(handler)
        return handler

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        logger.info(
            "sweep_watcher_started",
            extra={
                "poll.interval": self._poll_interval,
                "sweep.interval": self._scheduler.interval_seconds,
            },
        )
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("sweep_watcher_stopped", extra={"poll.count": self._poll_count})

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error("sweep_poll_error", extra={"error.message": str(e)})
            await asyncio.sleep(self._poll_interval)

    async def poll_once(self) -> SweepResult:
        """Run one throttled sweep and notify handlers."""
        self._poll_count += 1
        if self._poll_count % HEARTBEAT_INTERVAL == 0:
            logger.info("sweep_watcher_heartbeat", extra={"poll.count": self._poll_count})

        result = await self._scheduler.maybe_run(self._now())
        if result.skipped:
            return result

        for handler in self._handlers:
            try:
                await handler(result)
            except Exception as e:
                logger.error("sweep_handler_error", extra={"error.message": str(e)})
        return result
