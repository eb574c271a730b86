"""Per-player cumulative counters."""

from typing import Union

from .crud import (
    add_playtime,
    get_player_stats,
    get_player_value,
    get_top_players_by_joins,
    increment_counter,
    sum_playtime,
    update_last_activity,
    upsert_player_join,
)
from .db.database import Database
from .logger import log_exception
from .models import PlayerCounter, PlayerProfile, PlayerStats

CounterName = Union[PlayerCounter, str]


def resolve_counter(counter: CounterName) -> PlayerCounter:
    """Accept a PlayerCounter or its column name.

    Raises:
        ValueError: If the name is not a known counter
    """
    try:
        return PlayerCounter(counter)
    except ValueError:
        valid = ", ".join(c.value for c in PlayerCounter)
        raise ValueError(f"Unknown counter {counter!r}, expected one of: {valid}") from None


class PlayerStatsStore:
    """Reads and updates player_stats rows.

    Writes are single statements (upsert or ``col = col + n``) so concurrent
    writers never lose updates. Readers return zero values for unknown players.
    """

    def __init__(self, database: Database):
        self.database = database

    @log_exception("Error recording player join for {player_name}")
    async def record_join(self, player_name: str) -> None:
        async with self.database.session() as session:
            await upsert_player_join(session, self.database.dialect, player_name)

    async def add_playtime(self, player_name: str, duration_ms: int) -> None:
        """Add a finished session's duration to the player's total playtime."""
        await self._add_playtime(player_name, max(int(duration_ms), 0))

    @log_exception("Error updating player playtime for {player_name}")
    async def _add_playtime(self, player_name: str, duration_ms: int) -> None:
        async with self.database.session() as session:
            await add_playtime(session, player_name, duration_ms)

    async def increment_counter(self, player_name: str, counter: CounterName) -> None:
        """Increment a gameplay counter by one.

        Raises:
            ValueError: If counter is not a PlayerCounter name
        """
        await self._increment_counter(player_name, resolve_counter(counter))

    @log_exception("Error incrementing {counter} for {player_name}")
    async def _increment_counter(self, player_name: str, counter: PlayerCounter) -> None:
        async with self.database.session() as session:
            await increment_counter(session, player_name, counter)

    @log_exception("Error updating last activity for {player_name}")
    async def touch_activity(self, player_name: str) -> None:
        async with self.database.session() as session:
            await update_last_activity(session, self.database.dialect, player_name)

    # Readers

    @log_exception("Error getting player join count for {player_name}", default_return=0)
    async def get_join_count(self, player_name: str) -> int:
        async with self.database.session() as session:
            return await get_player_value(session, player_name, PlayerStats.total_joins)

    @log_exception("Error getting player playtime for {player_name}", default_return=0)
    async def get_total_playtime(self, player_name: str) -> int:
        async with self.database.session() as session:
            return await get_player_value(
                session, player_name, PlayerStats.total_playtime
            )

    async def get_counter(self, player_name: str, counter: CounterName) -> int:
        """Read one gameplay counter, 0 for unknown players.

        Raises:
            ValueError: If counter is not a PlayerCounter name
        """
        return await self._get_counter(player_name, resolve_counter(counter))

    @log_exception("Error getting {counter} for {player_name}", default_return=0)
    async def _get_counter(self, player_name: str, counter: PlayerCounter) -> int:
        async with self.database.session() as session:
            return await get_player_value(
                session, player_name, getattr(PlayerStats, counter.value)
            )

    async def get_deaths(self, player_name: str) -> int:
        return await self.get_counter(player_name, PlayerCounter.DEATHS)

    async def get_mob_kills(self, player_name: str) -> int:
        return await self.get_counter(player_name, PlayerCounter.MOB_KILLS)

    async def get_player_kills(self, player_name: str) -> int:
        return await self.get_counter(player_name, PlayerCounter.PLAYER_KILLS)

    async def get_blocks_broken(self, player_name: str) -> int:
        return await self.get_counter(player_name, PlayerCounter.BLOCKS_BROKEN)

    async def get_blocks_placed(self, player_name: str) -> int:
        return await self.get_counter(player_name, PlayerCounter.BLOCKS_PLACED)

    async def get_messages_sent(self, player_name: str) -> int:
        return await self.get_counter(player_name, PlayerCounter.MESSAGES_SENT)

    @log_exception("Error getting top players", default_return={})
    async def get_top_by_joins(self, limit: int = 10) -> dict[str, int]:
        """Players with the most joins, in descending order."""
        async with self.database.session() as session:
            return await get_top_players_by_joins(session, limit)

    @log_exception("Error getting total playtime", default_return=0)
    async def get_total_playtime_all_players(self) -> int:
        async with self.database.session() as session:
            return await sum_playtime(session)

    async def get_profile(self, player_name: str) -> PlayerProfile:
        """All counters of a player in one read. Unknown players get zeros."""
        profile = await self._get_profile(player_name)
        return profile if profile is not None else PlayerProfile(player_name=player_name)

    @log_exception("Error getting player profile for {player_name}")
    async def _get_profile(self, player_name: str) -> PlayerProfile | None:
        async with self.database.session() as session:
            stats = await get_player_stats(session, player_name)
        if stats is None:
            return None
        return PlayerProfile(
            player_name=stats.player_name,
            total_joins=stats.total_joins,
            total_playtime_ms=stats.total_playtime,
            deaths=stats.deaths,
            mob_kills=stats.mob_kills,
            player_kills=stats.player_kills,
            blocks_broken=stats.blocks_broken,
            blocks_placed=stats.blocks_placed,
            messages_sent=stats.messages_sent,
            first_join=stats.first_join,
            last_join=stats.last_join,
            last_activity=stats.last_activity,
        )
