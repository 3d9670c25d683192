"""
app/services/scheduler.py — Background cache refreshers
========================================================
Fixed-interval asyncio loops started from the FastAPI lifespan.

  every_interval(...)  → run now, then every N seconds
  daily_at_utc(...)    → run at HH:00 UTC, then every 24 hours

No backoff, retry or jitter: a failed refresh is logged and simply tried
again on the next tick. Blocking refresh functions (pymongo, requests) run in
a worker thread so the event loop keeps serving requests.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60


def seconds_until_utc_hour(hour: int, now: datetime | None = None) -> float:
    """Seconds from *now* until the next HH:00:00 UTC (strictly in the future)."""
    now = now or datetime.now(timezone.utc)
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


async def _run_once(name: str, func: Callable[[], object]):
    try:
        await asyncio.to_thread(func)
    except Exception:
        logger.exception(f"Background refresh '{name}' failed")


async def every_interval(name: str, func: Callable[[], object], interval_seconds: float, run_first: bool = True):
    if run_first:
        await _run_once(name, func)
    while True:
        await asyncio.sleep(interval_seconds)
        await _run_once(name, func)


async def daily_at_utc(name: str, func: Callable[[], object], hour: int):
    delay = seconds_until_utc_hour(hour)
    logger.info(f"Scheduling '{name}' in {delay:.0f} seconds.")
    await asyncio.sleep(delay)
    await every_interval(name, func, DAY_SECONDS, run_first=True)


class RefreshScheduler:
    """Owns the refresh tasks so the lifespan can cancel them on shutdown."""

    def __init__(self):
        self.tasks: List[asyncio.Task] = []

    def start(self, coro, name: str):
        self.tasks.append(asyncio.create_task(coro, name=name))
        logger.info(f"Started background task '{name}'")

    async def stop(self):
        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()
