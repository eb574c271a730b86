"""CRUD operations for PlayerSession model."""
# flake8: noqa: E711

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.dialects import StoreDialect
from ..models import PlayerSession


async def create_session(
    session: AsyncSession, dialect: StoreDialect, player_name: str
) -> None:
    """Append an open session row with join_time = now.

    Args:
        session: Database session
        dialect: Store dialect providing "now"
        player_name: Player name
    """
    await session.execute(
        insert(PlayerSession).values(player_name=player_name, join_time=dialect.now())
    )
    await session.commit()


async def get_open_session(
    session: AsyncSession, player_name: str
) -> Optional[PlayerSession]:
    """Get the most recent open session of a player.

    Args:
        session: Database session
        player_name: Player name

    Returns:
        Open session or None
    """
    result = await session.execute(
        select(PlayerSession)
        .where(
            PlayerSession.player_name == player_name,
            PlayerSession.quit_time == None,
        )
        .order_by(PlayerSession.join_time.desc(), PlayerSession.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def close_latest_session(
    session: AsyncSession,
    dialect: StoreDialect,
    player_name: str,
    duration_ms: int,
) -> bool:
    """Close the most recent open session of a player.

    Args:
        session: Database session
        dialect: Store dialect providing "now"
        player_name: Player name
        duration_ms: Session duration in milliseconds

    Returns:
        False if the player had no open session
    """
    open_session = await get_open_session(session, player_name)
    if open_session is None:
        return False

    await session.execute(
        update(PlayerSession)
        .where(PlayerSession.id == open_session.id)
        .values(quit_time=dialect.now(), session_duration=duration_ms)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return True


async def get_all_open_sessions(session: AsyncSession) -> List[PlayerSession]:
    """Get every session that has not been closed."""
    result = await session.execute(
        select(PlayerSession)
        .where(PlayerSession.quit_time == None)
        .order_by(PlayerSession.join_time)
    )
    return list(result.scalars().all())


async def end_sessions(
    session: AsyncSession, open_sessions: List[PlayerSession], quit_time: datetime
) -> dict[str, int]:
    """Close the given sessions at quit_time.

    Used by the startup sweep for sessions left open by a previous process.

    Args:
        session: Database session
        open_sessions: Sessions to close
        quit_time: Offset-adjusted quit timestamp

    Returns:
        Mapping of player name to the summed duration (ms) that was recorded
    """
    durations: dict[str, int] = {}
    for player_session in open_sessions:
        duration = int((quit_time - player_session.join_time).total_seconds() * 1000)
        duration = max(duration, 0)
        await session.execute(
            update(PlayerSession)
            .where(PlayerSession.id == player_session.id)
            .values(quit_time=quit_time, session_duration=duration)
            .execution_options(synchronize_session=False)
        )
        durations[player_session.player_name] = (
            durations.get(player_session.player_name, 0) + duration
        )

    if open_sessions:
        await session.commit()

    return durations


async def count_sessions(session: AsyncSession) -> int:
    """Count all session rows."""
    result = await session.execute(select(func.count(PlayerSession.id)))
    return result.scalar_one()


async def count_open_sessions(session: AsyncSession) -> int:
    """Count sessions with quit_time NULL."""
    result = await session.execute(
        select(func.count(PlayerSession.id)).where(PlayerSession.quit_time == None)
    )
    return result.scalar_one()
