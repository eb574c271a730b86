"""Tests for the session store."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from online_monitor.models import PlayerSession
from online_monitor.session_store import SessionStore


async def all_sessions(database) -> list[PlayerSession]:
    async with database.session() as session:
        result = await session.execute(select(PlayerSession).order_by(PlayerSession.id))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_open_then_close_records_duration(database):
    store = SessionStore(database)

    await store.open("Steve")
    assert await store.count_active() == 1

    await store.close("Steve", 90_000)

    sessions = await all_sessions(database)
    assert len(sessions) == 1
    assert sessions[0].quit_time is not None
    assert sessions[0].quit_time >= sessions[0].join_time
    assert sessions[0].session_duration == 90_000
    assert await store.count_active() == 0
    assert await store.count_total() == 1


@pytest.mark.asyncio
async def test_close_without_open_is_a_logged_noop(database, caplog):
    store = SessionStore(database)

    await store.close("Ghost", 1_000)

    assert await store.count_total() == 0
    assert "No active session found for player: Ghost" in caplog.text


@pytest.mark.asyncio
async def test_close_only_touches_latest_open_session(database):
    store = SessionStore(database)
    await store.open("Steve")
    await store.close("Steve", 1_000)
    await store.open("Steve")
    await store.open("Alex")

    await store.close("Steve", 2_000)

    sessions = await all_sessions(database)
    assert [s.session_duration for s in sessions] == [1_000, 2_000, None]
    assert sessions[2].player_name == "Alex"
    assert await store.count_active() == 1


@pytest.mark.asyncio
async def test_close_stale_sessions(database):
    now = await database.current_time()
    async with database.session() as session:
        session.add(PlayerSession(player_name="Steve", join_time=now - timedelta(hours=1)))
        session.add(PlayerSession(player_name="Alex", join_time=now - timedelta(minutes=10)))
        await session.commit()

    store = SessionStore(database)
    durations = await store.close_stale_sessions()

    assert set(durations) == {"Steve", "Alex"}
    assert abs(durations["Steve"] - 3_600_000) < 60_000
    assert abs(durations["Alex"] - 600_000) < 60_000
    assert await store.count_active() == 0


@pytest.mark.asyncio
async def test_close_stale_sessions_with_nothing_open(database):
    assert await SessionStore(database).close_stale_sessions() == {}


@pytest.mark.asyncio
async def test_readers_return_zero_on_failure(database, caplog):
    store = SessionStore(database)
    sessionmaker = database.sessionmaker
    database.sessionmaker = None

    assert await store.count_total() == 0
    assert await store.count_active() == 0
    assert "Error getting total sessions" in caplog.text

    database.sessionmaker = sessionmaker
