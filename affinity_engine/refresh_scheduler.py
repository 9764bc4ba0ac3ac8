"""Periodic affinity tag catalog refresh."""

import asyncio
import inspect
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Iterable, Optional, Union

from affinity_engine.catalog_registry import CatalogRegistry
from affinity_engine.tag_catalog import AffinityTag, CatalogSnapshot

logger = logging.getLogger(__name__)

REFRESH_INTERVALS = {
    "hourly": 60 * 60,
    "daily": 24 * 60 * 60,
    "weekly": 7 * 24 * 60 * 60,
}
DEFAULT_INTERVAL = "daily"

TagSourceResult = Union[CatalogSnapshot, Iterable[AffinityTag]]
TagSource = Callable[[], Union[TagSourceResult, Awaitable[TagSourceResult]]]


def interval_seconds(interval: str) -> int:
    return REFRESH_INTERVALS.get(interval, REFRESH_INTERVALS[DEFAULT_INTERVAL])


class RefreshScheduler:
    """Pulls a fresh tag list from *source* on a fixed interval and publishes it.

    A failed scheduled refresh is logged and remembered in ``last_error``;
    the previously published catalog keeps serving requests.
    """

    def __init__(self, registry: CatalogRegistry, source: TagSource):
        self.registry = registry
        self.source = source
        self.interval: Optional[str] = None
        self.last_run: Optional[datetime] = None
        self.next_run: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    async def refresh_now(self) -> int:
        """Fetch and publish immediately. Returns the new tag count.

        Sync sources and the matcher build run in a worker thread so file
        reads and index building never block the event loop.
        """
        try:
            if inspect.iscoroutinefunction(self.source):
                tags = await self.source()
            else:
                tags = await asyncio.to_thread(self.source)
                if inspect.isawaitable(tags):
                    tags = await tags
            matcher = await asyncio.to_thread(self.registry.publish, tags)
        except Exception as e:
            self.last_error = str(e)
            raise
        self.last_run = datetime.now(timezone.utc)
        self.last_error = None
        return len(matcher.catalog)

    async def _run(self, seconds: int):
        while True:
            self.next_run = datetime.now(timezone.utc) + timedelta(seconds=seconds)
            await asyncio.sleep(seconds)
            logger.info("Starting scheduled affinity tag refresh...")
            try:
                count = await self.refresh_now()
            except Exception as e:
                logger.warning(
                    f"Scheduled affinity tag refresh failed, keeping previous catalog: {e}",
                    exc_info=True,
                )
                continue
            logger.info(f"Scheduled refresh completed: {count} affinity tags published")

    def schedule(self, interval: str):
        """Start (or restart) periodic refresh. Must be called from a running loop."""
        self.cancel()
        if interval not in REFRESH_INTERVALS:
            logger.warning(f"Unknown refresh interval '{interval}', using {DEFAULT_INTERVAL}")
            interval = DEFAULT_INTERVAL
        seconds = interval_seconds(interval)
        self.interval = interval
        self.next_run = datetime.now(timezone.utc) + timedelta(seconds=seconds)
        self._task = asyncio.get_running_loop().create_task(self._run(seconds))
        logger.info(f"Scheduled affinity tag refresh every {interval} ({seconds}s)")

    def cancel(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Cleared existing affinity tag refresh schedule")
        self.interval = None
        self.next_run = None

    def update_schedule(self, auto_refresh: bool, interval: str):
        if auto_refresh:
            self.schedule(interval)
        else:
            self.cancel()

    async def shutdown(self):
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and not self._task.done()

    def status(self) -> dict:
        return {
            "is_scheduled": self.is_scheduled,
            "interval": self.interval,
            "last_run": self.last_run,
            "next_run": self.next_run,
            "last_error": self.last_error,
        }
