"""CRUD operations for the activity store."""

from .online_snapshot import (
    average_by_date,
    average_by_hour,
    average_by_weekday,
    create_snapshot,
    delete_snapshots_older_than,
    peak_by_hour,
)
from .player_session import (
    close_latest_session,
    count_open_sessions,
    count_sessions,
    create_session,
    end_sessions,
    get_all_open_sessions,
    get_open_session,
)
from .player_stats import (
    add_playtime,
    get_player_stats,
    get_player_value,
    get_top_players_by_joins,
    increment_counter,
    sum_playtime,
    update_last_activity,
    upsert_player_join,
)
from .server_stats import (
    get_server_stats,
    increment_unique_players,
    raise_max_online,
)

__all__ = [
    # Player Session
    "create_session",
    "get_open_session",
    "close_latest_session",
    "get_all_open_sessions",
    "end_sessions",
    "count_sessions",
    "count_open_sessions",
    # Player Stats
    "upsert_player_join",
    "add_playtime",
    "increment_counter",
    "update_last_activity",
    "get_player_stats",
    "get_player_value",
    "get_top_players_by_joins",
    "sum_playtime",
    # Server Stats
    "get_server_stats",
    "raise_max_online",
    "increment_unique_players",
    # Online Snapshot
    "create_snapshot",
    "average_by_hour",
    "average_by_date",
    "average_by_weekday",
    "peak_by_hour",
    "delete_snapshots_older_than",
]
