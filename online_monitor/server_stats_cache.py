"""Cached server-wide aggregates (peak online, distinct players)."""

import asyncio
import inspect
import threading
from typing import Awaitable, Callable, Union

from .crud import get_server_stats, increment_unique_players, raise_max_online
from .db.database import Database
from .logger import log_exception, logger

NewRecordCallback = Callable[[int], Union[None, Awaitable[None]]]


class ServerStatsCache:
    """Write-through cache over the server_stats singleton row.

    The cached pair is loaded from the database on first use and afterwards only
    changed after the matching database write succeeded, so it never runs ahead
    of the stored values. A failed load leaves the cache unloaded and the next
    call tries again.
    """

    def __init__(self, database: Database):
        self.database = database
        self._max_online = 0
        self._unique_players = 0
        self._loaded = False
        self._lock = threading.Lock()
        self._load_lock = asyncio.Lock()
        self._callbacks: list[NewRecordCallback] = []

    @property
    def loaded(self) -> bool:
        return self._loaded

    def on_new_record(self, callback: NewRecordCallback) -> None:
        """Register a callback run with the new peak whenever max online grows."""
        self._callbacks.append(callback)

    async def _ensure_loaded(self) -> bool:
        if self._loaded:
            return True
        async with self._load_lock:
            if not self._loaded:
                await self._load()
        return self._loaded

    @log_exception("Error loading server stats")
    async def _load(self) -> None:
        async with self.database.session() as session:
            stats = await get_server_stats(session)
        if stats is None:
            raise LookupError("server_stats row is missing")
        with self._lock:
            self._max_online = stats.max_online
            self._unique_players = stats.total_unique_players
            self._loaded = True
        logger.debug(
            f"Loaded server stats: max_online={stats.max_online}, "
            f"unique_players={stats.total_unique_players}"
        )

    async def get_max_online(self) -> int:
        """All-time peak of concurrent players, 0 if the stats cannot be loaded."""
        if not await self._ensure_loaded():
            return 0
        with self._lock:
            return self._max_online

    async def get_unique_players_count(self) -> int:
        """Number of distinct players ever seen, 0 if the stats cannot be loaded."""
        if not await self._ensure_loaded():
            return 0
        with self._lock:
            return self._unique_players

    async def update_max_online(self, current_online: int) -> bool:
        """Record current_online as the new peak if it beats the stored one.

        Returns:
            True if a new record was stored
        """
        await self._ensure_loaded()
        raised = await self._persist_max_online(current_online)
        if raised is None:
            return False

        if self._loaded:
            with self._lock:
                self._max_online = max(self._max_online, current_online)
        if raised:
            logger.info(f"New online record: {current_online} players")
            await self._notify_new_record(current_online)
        return raised

    @log_exception("Error updating max online to {current_online}")
    async def _persist_max_online(self, current_online: int) -> bool:
        async with self.database.session() as session:
            return await raise_max_online(session, current_online)

    async def increment_unique_player(self) -> None:
        """Count one more distinct player."""
        await self._ensure_loaded()
        if not await self._persist_unique_player():
            return
        if self._loaded:
            with self._lock:
                self._unique_players += 1

    @log_exception("Error incrementing unique players", default_return=False)
    async def _persist_unique_player(self) -> bool:
        async with self.database.session() as session:
            await increment_unique_players(session)
        return True

    async def _notify_new_record(self, max_online: int) -> None:
        for callback in list(self._callbacks):
            try:
                result = callback(max_online)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in new record callback: {e}", exc_info=True)
