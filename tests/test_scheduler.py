"""Tests for the periodic jobs."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from online_monitor.scheduler import CLEANUP_JOB_ID, SNAPSHOT_JOB_ID, MonitorScheduler


@pytest.fixture
def fake_monitor(monitor_settings):
    monitor = MagicMock()
    monitor.settings = monitor_settings
    monitor.online_players.return_value = ["Steve", "Alex"]
    monitor.prune_snapshots = AsyncMock(return_value=3)
    return monitor


@pytest.mark.asyncio
async def test_jobs_are_registered(fake_monitor):
    scheduler = MonitorScheduler(fake_monitor)
    scheduler.start()
    try:
        snapshot = scheduler.scheduler.get_job(SNAPSHOT_JOB_ID)
        cleanup = scheduler.scheduler.get_job(CLEANUP_JOB_ID)

        assert snapshot.trigger.interval.total_seconds() == 5 * 60
        assert cleanup.trigger.interval.total_seconds() == 24 * 3600
    finally:
        scheduler.shutdown()


@pytest.mark.asyncio
async def test_snapshot_uses_join_map_by_default(fake_monitor):
    await MonitorScheduler(fake_monitor).take_snapshot()

    fake_monitor.record_snapshot.assert_called_once_with(2)


@pytest.mark.asyncio
async def test_snapshot_uses_provider(fake_monitor):
    await MonitorScheduler(fake_monitor, online_count_provider=lambda: 17).take_snapshot()

    fake_monitor.record_snapshot.assert_called_once_with(17)


@pytest.mark.asyncio
async def test_failing_provider_skips_snapshot(fake_monitor, caplog):
    def provider():
        raise RuntimeError("server not ready")

    await MonitorScheduler(fake_monitor, online_count_provider=provider).take_snapshot()

    fake_monitor.record_snapshot.assert_not_called()
    assert "server not ready" in caplog.text


@pytest.mark.asyncio
async def test_cleanup_uses_retention(fake_monitor):
    await MonitorScheduler(fake_monitor).cleanup()

    fake_monitor.prune_snapshots.assert_awaited_once_with(30)
