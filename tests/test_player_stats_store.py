"""Tests for per-player counters."""

import pytest

from online_monitor.models import PlayerCounter
from online_monitor.player_stats_store import PlayerStatsStore


@pytest.fixture
def store(database):
    return PlayerStatsStore(database)


@pytest.mark.asyncio
async def test_join_count_increments(store):
    await store.record_join("Steve")
    assert await store.get_join_count("Steve") == 1

    await store.record_join("Steve")
    assert await store.get_join_count("Steve") == 2


@pytest.mark.asyncio
async def test_first_join_is_kept_on_rejoin(store):
    await store.record_join("Steve")
    first = await store.get_profile("Steve")

    await store.record_join("Steve")
    second = await store.get_profile("Steve")

    assert first.first_join is not None
    assert second.first_join == first.first_join
    assert second.last_join >= first.last_join


@pytest.mark.asyncio
async def test_names_are_case_sensitive(store):
    await store.record_join("Steve")
    await store.record_join("steve")

    assert await store.get_join_count("Steve") == 1
    assert await store.get_join_count("steve") == 1


@pytest.mark.asyncio
async def test_unknown_player_defaults(store):
    assert await store.get_join_count("Nobody") == 0
    assert await store.get_total_playtime("Nobody") == 0
    assert await store.get_deaths("Nobody") == 0

    profile = await store.get_profile("Nobody")
    assert profile.player_name == "Nobody"
    assert profile.total_joins == 0
    assert profile.first_join is None


@pytest.mark.asyncio
async def test_playtime_accumulates_and_clamps_negative(store):
    await store.record_join("Steve")

    await store.add_playtime("Steve", 60_000)
    await store.add_playtime("Steve", 30_000)
    await store.add_playtime("Steve", -5_000)

    assert await store.get_total_playtime("Steve") == 90_000


@pytest.mark.asyncio
async def test_counters(store):
    await store.record_join("Steve")

    await store.increment_counter("Steve", PlayerCounter.DEATHS)
    await store.increment_counter("Steve", PlayerCounter.DEATHS)
    await store.increment_counter("Steve", "mob_kills")
    await store.increment_counter("Steve", PlayerCounter.MESSAGES_SENT)

    assert await store.get_deaths("Steve") == 2
    assert await store.get_mob_kills("Steve") == 1
    assert await store.get_messages_sent("Steve") == 1
    assert await store.get_player_kills("Steve") == 0
    assert await store.get_counter("Steve", "deaths") == 2

    profile = await store.get_profile("Steve")
    assert profile.deaths == 2
    assert profile.mob_kills == 1
    assert profile.blocks_broken == 0


@pytest.mark.asyncio
async def test_unknown_counter_raises(store):
    with pytest.raises(ValueError):
        await store.increment_counter("Steve", "jumps")
    with pytest.raises(ValueError):
        await store.get_counter("Steve", "jumps")


@pytest.mark.asyncio
async def test_touch_activity(store):
    await store.record_join("Steve")
    assert (await store.get_profile("Steve")).last_activity is None

    await store.touch_activity("Steve")

    assert (await store.get_profile("Steve")).last_activity is not None


@pytest.mark.asyncio
async def test_top_players_by_joins(store):
    for name, joins in [("Alex", 2), ("Steve", 5), ("Herobrine", 2), ("Notch", 1)]:
        for _ in range(joins):
            await store.record_join(name)

    top = await store.get_top_by_joins(3)

    # Ties keep insertion order
    assert list(top.items()) == [("Steve", 5), ("Alex", 2), ("Herobrine", 2)]


@pytest.mark.asyncio
async def test_total_playtime_all_players(store):
    assert await store.get_total_playtime_all_players() == 0

    await store.record_join("Steve")
    await store.record_join("Alex")
    await store.add_playtime("Steve", 1_000)
    await store.add_playtime("Alex", 2_500)

    assert await store.get_total_playtime_all_players() == 3_500
