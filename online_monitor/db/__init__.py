from .database import Database, connect, database_url_from_settings, migrate
from .dialects import StoreDialect, get_dialect, parse_timezone_offset

__all__ = [
    "Database",
    "connect",
    "migrate",
    "database_url_from_settings",
    "StoreDialect",
    "get_dialect",
    "parse_timezone_offset",
]
