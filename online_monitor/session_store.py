"""Session tracking for player game sessions."""

from .crud import (
    close_latest_session,
    count_open_sessions,
    count_sessions,
    create_session,
    end_sessions,
    get_all_open_sessions,
)
from .db.database import Database
from .logger import log_exception, logger


class SessionStore:
    """Records join/quit intervals as player_sessions rows.

    A player moves NoSession/Closed -> Open on ``open`` and Open -> Closed on
    ``close``. ``open`` does not look for an existing open row; keeping a single
    open session per player is the caller's job (OnlineMonitor's join map).
    """

    def __init__(self, database: Database):
        self.database = database

    @log_exception("Error opening session for {player_name}")
    async def open(self, player_name: str) -> None:
        async with self.database.session() as session:
            await create_session(session, self.database.dialect, player_name)
        logger.debug(f"Opened session for {player_name}")

    @log_exception("Error closing session for {player_name}")
    async def close(self, player_name: str, duration_ms: int) -> None:
        """Close the latest open session of a player.

        A missing open session (duplicate quit, lost join write) is only logged.
        """
        async with self.database.session() as session:
            closed = await close_latest_session(
                session, self.database.dialect, player_name, duration_ms
            )
        if closed:
            logger.debug(f"Closed session for {player_name} ({duration_ms} ms)")
        else:
            logger.warning(f"No active session found for player: {player_name}")

    @log_exception("Error closing stale sessions", default_return={})
    async def close_stale_sessions(self) -> dict[str, int]:
        """Close sessions left open by a previous process.

        Must run before any new session is opened. Each stale session is closed
        at the current time, so its duration covers the downtime as well.

        Returns:
            Mapping of player name to the duration (ms) recorded for them
        """
        quit_time = await self.database.current_time()
        async with self.database.session() as session:
            open_sessions = await get_all_open_sessions(session)
            durations = await end_sessions(session, open_sessions, quit_time)

        if open_sessions:
            logger.warning(
                f"Closed {len(open_sessions)} stale session(s) left open by a previous run: "
                f"{sorted(durations)}"
            )
        return durations

    @log_exception("Error getting total sessions", default_return=0)
    async def count_total(self) -> int:
        async with self.database.session() as session:
            return await count_sessions(session)

    @log_exception("Error getting active sessions", default_return=0)
    async def count_active(self) -> int:
        async with self.database.session() as session:
            return await count_open_sessions(session)
