"""Tests for AFK tracking."""

import pytest

from online_monitor.presence import PresenceTracker


@pytest.fixture
def tracker(clock):
    return PresenceTracker(default_threshold_ms=60_000, clock=clock)


def test_not_afk_right_after_touch(tracker):
    tracker.touch("Steve")

    assert tracker.is_afk("Steve", 1_000) is False
    assert tracker.time_since_activity("Steve") == 0


def test_becomes_afk_at_threshold(tracker, clock):
    tracker.touch("Steve")

    clock.advance(0.5)
    assert tracker.is_afk("Steve", 1_000) is False

    clock.advance(0.5)
    assert tracker.is_afk("Steve", 1_000) is True
    assert tracker.time_since_activity("Steve") == 1_000


def test_touch_resets_idle_time(tracker, clock):
    tracker.touch("Steve")
    clock.advance(120)
    assert tracker.is_afk("Steve") is True

    tracker.touch("Steve")

    assert tracker.is_afk("Steve") is False


def test_untracked_players_are_never_afk(tracker, clock):
    tracker.touch("Steve")
    clock.advance(120)

    tracker.remove("Steve")

    assert tracker.is_afk("Steve", 1_000) is False
    assert tracker.time_since_activity("Steve") == 0
    assert tracker.is_afk("Nobody", 0) is False
    assert tracker.is_tracked("Steve") is False


def test_list_and_count_afk(tracker, clock):
    tracker.touch("Steve")
    tracker.touch("Alex")
    clock.advance(90)
    tracker.touch("Notch")

    assert tracker.list_afk() == {"Steve", "Alex"}
    assert tracker.count_afk() == 2
    assert tracker.count_afk(100_000) == 0
    assert tracker.tracked_count() == 3


def test_clear(tracker):
    tracker.touch("Steve")
    tracker.touch("Alex")

    tracker.clear()

    assert tracker.tracked_count() == 0
    assert tracker.list_afk(0) == set()
