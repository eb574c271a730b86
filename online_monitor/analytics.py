"""Periodic online-count snapshots and the time-bucketed reports built on them."""

from .crud import (
    average_by_date,
    average_by_hour,
    average_by_weekday,
    create_snapshot,
    delete_snapshots_older_than,
    peak_by_hour,
)
from .db.database import Database
from .logger import log_exception, logger
from .models import PeakHour

# Indexed by the weekday buckets returned by weekday_averages (0 = Sunday)
WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def weekday_name(index: int) -> str:
    """Name of a weekday bucket, 0 = Sunday ... 6 = Saturday."""
    return WEEKDAY_NAMES[index % 7]


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


class AnalyticsStore:
    """Stores snapshots and answers averages and peaks over rolling windows.

    Every window starts at "now minus the window" in the same offset clock the
    snapshots are stamped with. Buckets without snapshots are left out.
    """

    def __init__(self, database: Database):
        self.database = database

    @log_exception("Error recording snapshot of {online_count} players")
    async def record_snapshot(self, online_count: int) -> None:
        async with self.database.session() as session:
            await create_snapshot(session, self.database.dialect, online_count)

    @log_exception("Error getting hourly averages", default_return={})
    async def hourly_averages(self, days_back: int) -> dict[int, float]:
        """Average online count per hour of day (0-23), ordered by hour."""
        async with self.database.session() as session:
            return await average_by_hour(session, self.database.dialect, days_back)

    @log_exception("Error getting daily averages", default_return={})
    async def daily_averages(self, days_back: int) -> dict[str, float]:
        """Average online count per date ("YYYY-MM-DD"), oldest first."""
        async with self.database.session() as session:
            return await average_by_date(session, self.database.dialect, days_back)

    @log_exception("Error getting weekday averages", default_return={})
    async def weekday_averages(self, weeks_back: int) -> dict[int, float]:
        """Average online count per weekday (0 = Sunday), ordered by weekday."""
        async with self.database.session() as session:
            return await average_by_weekday(session, self.database.dialect, weeks_back)

    @log_exception("Error getting peak hours", default_return=[])
    async def peak_hours(self, days_back: int) -> list[PeakHour]:
        async with self.database.session() as session:
            peaks = await peak_by_hour(session, self.database.dialect, days_back)
        return [PeakHour(hour_label=hour_label(h), peak_online=p) for h, p in peaks]

    @log_exception("Error cleaning old snapshots", default_return=0)
    async def prune_older_than(self, days_to_keep: int) -> int:
        """Delete snapshots older than days_to_keep days.

        Returns:
            Number of deleted snapshots
        """
        async with self.database.session() as session:
            deleted = await delete_snapshots_older_than(
                session, self.database.dialect, days_to_keep
            )
        logger.info(f"Cleaned {deleted} old snapshots")
        return deleted
