"""In-memory AFK tracking."""

import threading
import time
from typing import Callable, Optional

MS_PER_MINUTE = 60_000


class PresenceTracker:
    """Tracks when each online player last did something.

    Nothing here is persisted. Times come from a monotonic clock so AFK checks
    are unaffected by wall-clock changes. Untracked players are never AFK.
    """

    def __init__(
        self,
        default_threshold_ms: int = 5 * MS_PER_MINUTE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            default_threshold_ms: Idle time after which a player counts as AFK
                when a check passes no threshold
            clock: Seconds source, injectable for tests
        """
        self.default_threshold_ms = default_threshold_ms
        self._clock = clock
        self._last_activity: dict[str, float] = {}  # player name -> clock seconds
        self._lock = threading.Lock()

    def touch(self, player_name: str) -> None:
        """Record activity now, starting to track the player if needed."""
        with self._lock:
            self._last_activity[player_name] = self._clock()

    def remove(self, player_name: str) -> None:
        with self._lock:
            self._last_activity.pop(player_name, None)

    def clear(self) -> None:
        with self._lock:
            self._last_activity.clear()

    def is_tracked(self, player_name: str) -> bool:
        with self._lock:
            return player_name in self._last_activity

    def tracked_count(self) -> int:
        with self._lock:
            return len(self._last_activity)

    def time_since_activity(self, player_name: str) -> int:
        """Milliseconds since the player's last activity, 0 if untracked."""
        with self._lock:
            last = self._last_activity.get(player_name)
        if last is None:
            return 0
        return self._elapsed_ms(last)

    def is_afk(self, player_name: str, threshold_ms: Optional[int] = None) -> bool:
        threshold = self._threshold(threshold_ms)
        with self._lock:
            last = self._last_activity.get(player_name)
        if last is None:
            return False
        return self._elapsed_ms(last) >= threshold

    def list_afk(self, threshold_ms: Optional[int] = None) -> set[str]:
        threshold = self._threshold(threshold_ms)
        with self._lock:
            snapshot = list(self._last_activity.items())
        return {
            name for name, last in snapshot if self._elapsed_ms(last) >= threshold
        }

    def count_afk(self, threshold_ms: Optional[int] = None) -> int:
        return len(self.list_afk(threshold_ms))

    def _threshold(self, threshold_ms: Optional[int]) -> int:
        return self.default_threshold_ms if threshold_ms is None else threshold_ms

    def _elapsed_ms(self, last: float) -> int:
        return max(int((self._clock() - last) * 1000), 0)
