"""CRUD operations for PlayerStats model."""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.dialects import StoreDialect
from ..models import PlayerCounter, PlayerStats


async def upsert_player_join(
    session: AsyncSession, dialect: StoreDialect, player_name: str
) -> None:
    """Count one join for a player, creating the row on first join.

    Args:
        session: Database session
        dialect: Store dialect building the backend's upsert
        player_name: Player name
    """
    await session.execute(dialect.upsert_player_join(player_name))
    await session.commit()


async def add_playtime(session: AsyncSession, player_name: str, duration_ms: int) -> None:
    """Add to a player's total playtime.

    Args:
        session: Database session
        player_name: Player name
        duration_ms: Milliseconds to add, already clamped to >= 0
    """
    await session.execute(
        update(PlayerStats)
        .where(PlayerStats.player_name == player_name)
        .values(total_playtime=PlayerStats.total_playtime + duration_ms)
        .execution_options(synchronize_session=False)
    )
    await session.commit()


async def increment_counter(
    session: AsyncSession, player_name: str, counter: PlayerCounter
) -> None:
    """Increment one gameplay counter in a single statement.

    Args:
        session: Database session
        player_name: Player name
        counter: Counter column to increment
    """
    column = getattr(PlayerStats, counter.value)
    await session.execute(
        update(PlayerStats)
        .where(PlayerStats.player_name == player_name)
        .values({column: column + 1})
        .execution_options(synchronize_session=False)
    )
    await session.commit()


async def update_last_activity(
    session: AsyncSession, dialect: StoreDialect, player_name: str
) -> None:
    """Set last_activity to now."""
    await session.execute(
        update(PlayerStats)
        .where(PlayerStats.player_name == player_name)
        .values(last_activity=dialect.now())
        .execution_options(synchronize_session=False)
    )
    await session.commit()


async def get_player_stats(
    session: AsyncSession, player_name: str
) -> Optional[PlayerStats]:
    """Get the stats row of a player, or None if never seen."""
    result = await session.execute(
        select(PlayerStats).where(PlayerStats.player_name == player_name)
    )
    return result.scalar_one_or_none()


async def get_player_value(session: AsyncSession, player_name: str, column) -> int:
    """Read a single numeric column of a player, 0 if the player is unknown."""
    result = await session.execute(
        select(column).where(PlayerStats.player_name == player_name)
    )
    return result.scalar_one_or_none() or 0


async def get_top_players_by_joins(session: AsyncSession, limit: int) -> dict[str, int]:
    """Players with the most joins, highest first.

    Ties keep storage order (first inserted first).
    """
    result = await session.execute(
        select(PlayerStats.player_name, PlayerStats.total_joins)
        .order_by(PlayerStats.total_joins.desc(), PlayerStats.id.asc())
        .limit(limit)
    )
    return {name: joins for name, joins in result.all()}


async def sum_playtime(session: AsyncSession) -> int:
    """Total playtime of all players in milliseconds."""
    result = await session.execute(
        select(func.coalesce(func.sum(PlayerStats.total_playtime), 0))
    )
    return int(result.scalar_one())
