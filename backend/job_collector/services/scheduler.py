"""
Collection Scheduler

Runs collection cycles periodically inside the running event loop.
"""

import asyncio
from typing import Optional, Set

from job_collector.services.collector import JobCollectionService
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)

ERROR_RETRY_SECONDS = 300


class CollectionScheduler:
    """
    Periodic cycle trigger.

    ``start()`` spawns a background task that optionally runs a cycle right
    away and then one every ``interval_hours``. ``trigger()`` runs a single
    extra cycle on demand.
    """

    def __init__(
        self,
        service: JobCollectionService,
        search_url: str,
        interval_hours: float = 2.0,
        run_on_startup: bool = True
    ) -> None:
        self.service = service
        self.search_url = search_url
        self.interval_hours = interval_hours
        self.run_on_startup = run_on_startup

        self._task: Optional[asyncio.Task] = None
        self._manual_tasks: Set[asyncio.Task] = set()

    @property
    def interval_seconds(self) -> float:
        return self.interval_hours * 3600

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the periodic loop; a second call is a no-op."""
        if self.is_running:
            logger.warning("Scheduler already running")
            return
        self._task = asyncio.create_task(self._run_periodic(), name="collection-scheduler")
        logger.info(
            "Scheduler started",
            interval_hours=self.interval_hours,
            run_on_startup=self.run_on_startup
        )

    async def stop(self) -> None:
        """Cancel the periodic loop and any manually triggered cycles."""
        tasks = list(self._manual_tasks)
        if self._task is not None:
            tasks.append(self._task)

        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._task = None
        self._manual_tasks.clear()
        logger.info("Scheduler stopped")

    async def _run_periodic(self) -> None:
        if not self.run_on_startup:
            await asyncio.sleep(self.interval_seconds)

        while True:
            try:
                await self.service.run_cycle(self.search_url)
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error in periodic collection: {e}", exc_info=e)
                await asyncio.sleep(min(ERROR_RETRY_SECONDS, self.interval_seconds))

    def trigger(self, search_url: Optional[str] = None) -> bool:
        """
        Start one cycle in the background.

        Returns:
            bool: False when a cycle is running or a triggered one has not
            started yet, True otherwise
        """
        if self.service.is_running or self._manual_tasks:
            logger.info("Manual trigger skipped, cycle in progress", state=self.service.state.value)
            return False

        task = asyncio.create_task(self._run_once(search_url or self.search_url))
        self._manual_tasks.add(task)
        task.add_done_callback(self._manual_tasks.discard)
        return True

    async def _run_once(self, search_url: str) -> None:
        try:
            await self.service.run_cycle(search_url)
        except Exception as e:
            logger.error(f"Error in manually triggered collection: {e}", exc_info=e)
