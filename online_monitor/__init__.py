"""Player activity tracking and online analytics for game servers."""

from .analytics import WEEKDAY_NAMES, AnalyticsStore, weekday_name
from .config import Settings
from .db import Database, connect, migrate
from .exceptions import ConnectFailed, MigrationFailed, OnlineMonitorError
from .models import PeakHour, PlayerCounter, PlayerProfile, ServerSummary
from .monitor import OnlineMonitor
from .player_stats_store import PlayerStatsStore
from .presence import PresenceTracker
from .scheduler import MonitorScheduler
from .server_stats_cache import ServerStatsCache
from .session_store import SessionStore
from .write_queue import WriteQueue

__all__ = [
    "OnlineMonitor",
    "MonitorScheduler",
    "Settings",
    # Stores
    "Database",
    "connect",
    "migrate",
    "SessionStore",
    "PlayerStatsStore",
    "ServerStatsCache",
    "AnalyticsStore",
    "PresenceTracker",
    "WriteQueue",
    # Models
    "PlayerCounter",
    "PlayerProfile",
    "PeakHour",
    "ServerSummary",
    "WEEKDAY_NAMES",
    "weekday_name",
    # Errors
    "OnlineMonitorError",
    "ConnectFailed",
    "MigrationFailed",
]
