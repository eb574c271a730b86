"""CRUD operations for the server_stats singleton row."""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import ServerStats

SERVER_STATS_ID = 1


async def get_server_stats(session: AsyncSession) -> Optional[ServerStats]:
    """Get the server stats record.

    Returns:
        Server stats record or None if the row is missing
    """
    result = await session.execute(
        select(ServerStats).where(ServerStats.id == SERVER_STATS_ID)
    )
    return result.scalar_one_or_none()


async def raise_max_online(session: AsyncSession, current_online: int) -> bool:
    """Store current_online as the peak if it beats the persisted one.

    Args:
        session: Database session
        current_online: Current concurrent player count

    Returns:
        True if the persisted peak changed
    """
    result = await session.execute(
        update(ServerStats)
        .where(
            ServerStats.id == SERVER_STATS_ID,
            ServerStats.max_online < current_online,
        )
        .values(max_online=current_online)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount > 0


async def increment_unique_players(session: AsyncSession) -> None:
    """Add one to the distinct player count."""
    await session.execute(
        update(ServerStats)
        .where(ServerStats.id == SERVER_STATS_ID)
        .values(total_unique_players=ServerStats.total_unique_players + 1)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
