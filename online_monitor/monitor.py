"""OnlineMonitor: the entry point host event handlers and read paths talk to."""

import time
from typing import Callable, Optional

from .analytics import AnalyticsStore
from .config import Settings
from .config import settings as default_settings
from .db.database import Database, connect, database_url_from_settings, migrate
from .exceptions import MigrationFailed
from .logger import logger
from .models import PeakHour, PlayerCounter, PlayerProfile, ServerSummary
from .player_stats_store import CounterName, PlayerStatsStore, resolve_counter
from .presence import MS_PER_MINUTE, PresenceTracker
from .server_stats_cache import ServerStatsCache
from .session_store import SessionStore
from .write_queue import GLOBAL_KEY, WriteQueue


class OnlineMonitor:
    """Player activity tracking on top of the stores.

    Write methods are plain functions that queue the database work and return
    at once; they must be called from the event loop thread. Read methods are
    coroutines and return zero/empty defaults when the database fails.

    The join map (player name -> join instant) keeps at most one open session
    per player and measures session durations.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.database = database
        self.settings = settings
        self._clock = clock
        self._join_times: dict[str, float] = {}

        self.sessions = SessionStore(database)
        self.player_stats = PlayerStatsStore(database)
        self.server_stats = ServerStatsCache(database)
        self.analytics = AnalyticsStore(database)
        self.presence = PresenceTracker(
            default_threshold_ms=settings.afk_threshold_minutes * MS_PER_MINUTE,
            clock=clock,
        )
        self.write_queue = WriteQueue(
            workers=settings.write_workers, queue_size=settings.write_queue_size
        )

    @classmethod
    async def create(cls, settings: Optional[Settings] = None) -> "OnlineMonitor":
        """Connect, migrate and start a monitor.

        Raises:
            ConnectFailed: If the database cannot be reached
            MigrationFailed: If the schema cannot be brought up to date
        """
        settings = settings or default_settings

        database = await connect(
            database_url_from_settings(settings.database),
            timezone_offset=settings.timezone_offset,
            pool=settings.database.pool,
            echo=settings.database.echo,
        )
        try:
            await migrate(database)
        except MigrationFailed:
            await database.dispose()
            raise

        monitor = cls(database, settings)
        await monitor.start()
        return monitor

    async def start(self) -> None:
        """Start the write workers and recover sessions left open by a crash."""
        logger.info("Starting online monitor...")
        self.write_queue.start()

        stale = await self.sessions.close_stale_sessions()
        for player_name, duration_ms in stale.items():
            await self.player_stats.add_playtime(player_name, duration_ms)

        logger.info("Online monitor started")

    async def shutdown(self) -> None:
        """Close every open session, flush pending writes and release the pool."""
        logger.info("Stopping online monitor...")
        for player_name in list(self._join_times):
            self.player_quit(player_name)

        await self.write_queue.stop()
        self.presence.clear()
        await self.database.dispose()
        logger.info("Online monitor stopped")

    async def flush(self) -> None:
        """Wait until every queued write has been applied."""
        await self.write_queue.join()

    # Write API

    def player_joined(
        self,
        player_name: str,
        first_time: bool = False,
        online_count: Optional[int] = None,
    ) -> None:
        """Handle a player joining the server.

        Args:
            player_name: Player name
            first_time: The host has never seen this player before
            online_count: Concurrent players including this one, used for the peak
        """
        previous = self._join_times.get(player_name)
        if previous is not None:
            logger.warning(
                f"Player {player_name} joined while already online, closing previous session"
            )
            self._submit_close(player_name, self._elapsed_ms(previous))

        if online_count is not None:
            self.update_max_online(online_count)
        if first_time:
            logger.info(f"New player joined: {player_name}")
            self.increment_unique_player()

        self._join_times[player_name] = self._clock()
        self.presence.touch(player_name)
        self.write_queue.submit(
            player_name,
            lambda: self._record_join(player_name),
            f"join of {player_name}",
        )
        logger.info(f"{player_name} joined")

    def player_quit(self, player_name: str) -> None:
        """Handle a player leaving the server."""
        self.presence.remove(player_name)
        joined = self._join_times.pop(player_name, None)
        if joined is None:
            logger.warning(f"Player {player_name} quit without a recorded join")
            return

        duration_ms = self._elapsed_ms(joined)
        self._submit_close(player_name, duration_ms)
        logger.info(f"{player_name} spent in game: {duration_ms // 60_000} minutes")

    def record_activity(self, player_name: str, persist: bool = True) -> None:
        """Mark a player as active, e.g. on movement (persist=False) or chat."""
        self._touch_presence(player_name)
        if persist:
            self.write_queue.submit(
                player_name,
                lambda: self.player_stats.touch_activity(player_name),
                f"activity of {player_name}",
            )

    def increment_counter(self, player_name: str, counter: CounterName) -> None:
        """Count a gameplay event (death, kill, block, message) for a player.

        Raises:
            ValueError: If counter is not a PlayerCounter name
        """
        resolved = resolve_counter(counter)
        self._touch_presence(player_name)
        self.write_queue.submit(
            player_name,
            lambda: self._count_event(player_name, resolved),
            f"{resolved.value} of {player_name}",
        )

    def update_max_online(self, current_online: int) -> None:
        self.write_queue.submit(
            GLOBAL_KEY,
            lambda: self.server_stats.update_max_online(current_online),
            f"max online {current_online}",
        )

    def increment_unique_player(self) -> None:
        self.write_queue.submit(
            GLOBAL_KEY, self.server_stats.increment_unique_player, "unique player"
        )

    def record_snapshot(self, online_count: int) -> None:
        self.write_queue.submit(
            GLOBAL_KEY,
            lambda: self.analytics.record_snapshot(online_count),
            f"snapshot of {online_count} players",
        )

    async def _record_join(self, player_name: str) -> None:
        await self.player_stats.record_join(player_name)
        await self.sessions.open(player_name)

    async def _close_session(self, player_name: str, duration_ms: int) -> None:
        await self.sessions.close(player_name, duration_ms)
        await self.player_stats.add_playtime(player_name, duration_ms)

    async def _count_event(self, player_name: str, counter: PlayerCounter) -> None:
        await self.player_stats.increment_counter(player_name, counter)
        await self.player_stats.touch_activity(player_name)

    def _submit_close(self, player_name: str, duration_ms: int) -> None:
        self.write_queue.submit(
            player_name,
            lambda: self._close_session(player_name, duration_ms),
            f"quit of {player_name}",
        )

    def _touch_presence(self, player_name: str) -> None:
        # Late events after a quit must not start tracking the player again
        if player_name in self._join_times:
            self.presence.touch(player_name)

    def _elapsed_ms(self, since: float) -> int:
        return max(int((self._clock() - since) * 1000), 0)

    # In-memory reads

    def online_players(self) -> list[str]:
        """Players with an open session, in join order."""
        return list(self._join_times)

    def session_duration_ms(self, player_name: str) -> int:
        """Length of the player's current session, 0 if not online."""
        joined = self._join_times.get(player_name)
        return 0 if joined is None else self._elapsed_ms(joined)

    # Read API

    async def get_max_online(self) -> int:
        return await self.server_stats.get_max_online()

    async def get_unique_players_count(self) -> int:
        return await self.server_stats.get_unique_players_count()

    async def get_player_join_count(self, player_name: str) -> int:
        return await self.player_stats.get_join_count(player_name)

    async def get_player_total_playtime(self, player_name: str) -> int:
        return await self.player_stats.get_total_playtime(player_name)

    async def get_player_profile(self, player_name: str) -> PlayerProfile:
        return await self.player_stats.get_profile(player_name)

    async def get_top_players_by_joins(self, limit: int = 10) -> dict[str, int]:
        return await self.player_stats.get_top_by_joins(limit)

    async def get_total_playtime(self) -> int:
        return await self.player_stats.get_total_playtime_all_players()

    async def get_total_sessions(self) -> int:
        return await self.sessions.count_total()

    async def get_active_sessions(self) -> int:
        return await self.sessions.count_active()

    async def get_hourly_averages(self, days_back: int = 7) -> dict[int, float]:
        return await self.analytics.hourly_averages(days_back)

    async def get_daily_averages(self, days_back: int = 30) -> dict[str, float]:
        return await self.analytics.daily_averages(days_back)

    async def get_weekday_averages(self, weeks_back: int = 4) -> dict[int, float]:
        return await self.analytics.weekday_averages(weeks_back)

    async def get_peak_hours(self, days_back: int = 7) -> list[PeakHour]:
        return await self.analytics.peak_hours(days_back)

    async def get_server_summary(self, top_limit: int = 10) -> ServerSummary:
        """Server-wide numbers in one object, as shown on the dashboard."""
        return ServerSummary(
            max_online=await self.get_max_online(),
            unique_players=await self.get_unique_players_count(),
            total_sessions=await self.get_total_sessions(),
            active_sessions=await self.get_active_sessions(),
            total_playtime_ms=await self.get_total_playtime(),
            top_players=await self.get_top_players_by_joins(top_limit),
        )

    async def prune_snapshots(self, days_to_keep: Optional[int] = None) -> int:
        """Delete snapshots past retention (snapshot_days_to_keep by default)."""
        if days_to_keep is None:
            days_to_keep = self.settings.snapshot_days_to_keep
        return await self.analytics.prune_older_than(days_to_keep)
