"""Periodic snapshot and retention jobs."""

from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Settings
from .logger import logger
from .monitor import OnlineMonitor

SNAPSHOT_JOB_ID = "online_monitor_snapshot"
CLEANUP_JOB_ID = "online_monitor_cleanup"


class MonitorScheduler:
    """Records an online snapshot every few minutes and prunes old ones daily."""

    def __init__(
        self,
        monitor: OnlineMonitor,
        online_count_provider: Optional[Callable[[], int]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            monitor: Monitor the jobs write through
            online_count_provider: Returns the current number of online players;
                defaults to the size of the monitor's join map
            settings: Job intervals and retention, defaults to the monitor's settings
        """
        self.monitor = monitor
        self.online_count_provider = online_count_provider or (
            lambda: len(monitor.online_players())
        )
        self.settings = settings or monitor.settings
        self.scheduler = AsyncIOScheduler()

    def start(self) -> None:
        """Register the jobs and start the scheduler. Needs a running event loop."""
        if self.scheduler.running:
            return

        self.scheduler.add_job(
            self.take_snapshot,
            trigger=IntervalTrigger(minutes=self.settings.snapshot_interval_minutes),
            id=SNAPSHOT_JOB_ID,
            name="Online snapshot",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.add_job(
            self.cleanup,
            trigger=IntervalTrigger(hours=self.settings.cleanup_interval_hours),
            id=CLEANUP_JOB_ID,
            name="Snapshot cleanup",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info(
            f"Scheduler started: snapshot every {self.settings.snapshot_interval_minutes} min, "
            f"cleanup every {self.settings.cleanup_interval_hours} h"
        )

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    async def take_snapshot(self) -> None:
        try:
            online_count = self.online_count_provider()
        except Exception as e:
            logger.error(f"Error getting online player count: {e}", exc_info=True)
            return
        self.monitor.record_snapshot(online_count)

    async def cleanup(self) -> None:
        await self.monitor.prune_snapshots(self.settings.snapshot_days_to_keep)
