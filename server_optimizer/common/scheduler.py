"""
Interval Scheduler

ScheduledLoop calls an async callback on wall-clock boundaries that are
multiples of the interval (every :00 and :30 for a 30 s interval). A slow
callback does not push later runs back; boundaries that pass while it
runs are dropped, not queued.

    timer = ScheduledLoop(30.0, loop.evaluate, name="fps-check")
    await timer.start()
    ...
    timer.stop()
"""

import asyncio
import time
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable

from .logging_setup import get_service_logger

logger = get_service_logger("scheduler")

# Lateness above this is an NTP step or suspend/resume, not drift
CLOCK_JUMP_THRESHOLD_S = 30.0


def next_boundary(now: float, interval: float) -> float:
    """First multiple of interval strictly after now"""
    return (now // interval + 1) * interval


@dataclass
class TickStats:
    execution_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    drift_total_s: float = 0.0
    last_execution_s: float = 0.0


class ScheduledLoop:
    """Fires `callback` every `interval_seconds` until stopped"""

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], Awaitable[Any]],
        name: str = "unnamed",
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval must be > 0, got {interval_seconds}")

        self.interval = interval_seconds
        self.callback = callback
        self.name = name
        self.stats = TickStats()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"scheduler:{self.name}")

    def stop(self) -> None:
        """Cancel the timer; a callback in progress is cancelled with it."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def get_stats(self) -> dict[str, Any]:
        stats = asdict(self.stats)
        stats["drift_total_s"] = round(stats["drift_total_s"], 3)
        stats["last_execution_s"] = round(stats["last_execution_s"], 3)
        return {"name": self.name, "interval_s": self.interval, **stats}

    async def _run(self) -> None:
        due = next_boundary(time.time(), self.interval)
        while True:
            await asyncio.sleep(max(0.0, due - time.time()))
            self._record_lateness(time.time() - due)
            await self._fire()
            due = self._advance(due)

    async def _fire(self) -> None:
        started = time.monotonic()
        try:
            await self.callback()
        except Exception as e:
            self.stats.failure_count += 1
            logger.error(f"Scheduled callback '{self.name}' failed: {e}", exc_info=True)
        else:
            self.stats.execution_count += 1
        self.stats.last_execution_s = time.monotonic() - started

    def _record_lateness(self, lateness: float) -> None:
        if lateness > CLOCK_JUMP_THRESHOLD_S:
            logger.info(f"Scheduler '{self.name}' clock jump of {lateness:.0f}s, realigning")
        elif lateness > 0:
            self.stats.drift_total_s += lateness

    def _advance(self, due: float) -> float:
        upcoming = next_boundary(time.time(), self.interval)
        missed = round((upcoming - due) / self.interval) - 1
        if missed > 0:
            self.stats.skipped_count += missed
            logger.warning(
                f"Scheduler '{self.name}' dropped {missed} ticks "
                f"(callback took {self.stats.last_execution_s:.3f}s)"
            )
        return upcoming
