"""CRUD and aggregate queries for OnlineSnapshot model."""

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.dialects import StoreDialect, normalize_date
from ..models import OnlineSnapshot

PEAK_HOURS_LIMIT = 5


async def create_snapshot(
    session: AsyncSession, dialect: StoreDialect, online_count: int
) -> None:
    """Insert a snapshot stamped with the current offset-adjusted time."""
    await session.execute(
        insert(OnlineSnapshot).values(
            online_count=online_count, timestamp=dialect.now()
        )
    )
    await session.commit()


async def average_by_hour(
    session: AsyncSession, dialect: StoreDialect, days: int
) -> dict[int, float]:
    """Average online count per hour of day over the last ``days`` days.

    Returns:
        Mapping hour (0-23) -> average, ordered by hour
    """
    hour = dialect.hour_of(OnlineSnapshot.timestamp).label("hour")
    result = await session.execute(
        select(hour, func.avg(OnlineSnapshot.online_count))
        .where(OnlineSnapshot.timestamp >= dialect.cutoff(days=days))
        .group_by(hour)
        .order_by(hour)
    )
    return {int(h): float(avg) for h, avg in result.all()}


async def average_by_date(
    session: AsyncSession, dialect: StoreDialect, days: int
) -> dict[str, float]:
    """Average online count per calendar date over the last ``days`` days.

    Returns:
        Mapping "YYYY-MM-DD" -> average, in chronological order
    """
    day = dialect.date_of(OnlineSnapshot.timestamp).label("day")
    result = await session.execute(
        select(day, func.avg(OnlineSnapshot.online_count))
        .where(OnlineSnapshot.timestamp >= dialect.cutoff(days=days))
        .group_by(day)
        .order_by(day)
    )
    return {normalize_date(d): float(avg) for d, avg in result.all()}


async def average_by_weekday(
    session: AsyncSession, dialect: StoreDialect, weeks: int
) -> dict[int, float]:
    """Average online count per weekday over the last ``weeks`` weeks.

    Returns:
        Mapping weekday (0 = Sunday ... 6 = Saturday) -> average, ordered by weekday
    """
    weekday = dialect.weekday_of(OnlineSnapshot.timestamp).label("weekday_num")
    result = await session.execute(
        select(weekday, func.avg(OnlineSnapshot.online_count))
        .where(OnlineSnapshot.timestamp >= dialect.cutoff(weeks=weeks))
        .group_by(weekday)
        .order_by(weekday)
    )
    return {int(w): float(avg) for w, avg in result.all()}


async def peak_by_hour(
    session: AsyncSession, dialect: StoreDialect, days: int
) -> list[tuple[int, int]]:
    """Hours of day with the highest single snapshot, best first.

    Returns:
        Up to PEAK_HOURS_LIMIT (hour, peak online) pairs
    """
    hour = dialect.hour_of(OnlineSnapshot.timestamp).label("hour")
    peak = func.max(OnlineSnapshot.online_count).label("peak_online")
    result = await session.execute(
        select(hour, peak)
        .where(OnlineSnapshot.timestamp >= dialect.cutoff(days=days))
        .group_by(hour)
        .order_by(peak.desc(), hour)
        .limit(PEAK_HOURS_LIMIT)
    )
    return [(int(h), int(p)) for h, p in result.all()]


async def delete_snapshots_older_than(
    session: AsyncSession, dialect: StoreDialect, days: int
) -> int:
    """Delete snapshots older than ``days`` days.

    Returns:
        Number of deleted rows
    """
    result = await session.execute(
        delete(OnlineSnapshot)
        .where(OnlineSnapshot.timestamp < dialect.cutoff(days=days))
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount
