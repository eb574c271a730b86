"""Backend-specific SQL for timestamps, buckets and upserts.

Every query that needs "now", an age cutoff or a time bucket goes through a
StoreDialect, so supporting another backend means adding one subclass here.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any

from sqlalchemy import Date, DateTime, Integer, Interval, cast, extract, func, literal
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.sql import ColumnElement
from sqlalchemy.sql.expression import Executable, literal_column

from ..models import PlayerStats

MINUTES_PER_DAY = 24 * 60

_OFFSET_RE = re.compile(
    r"^(?:UTC|GMT)?\s*(?P<sign>[+-])?\s*(?P<hours>\d{1,2}(?:\.\d+)?)(?::(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


def parse_timezone_offset(offset: str | None) -> int:
    """Parse a timezone offset such as "+3", "-4", "+5.5" or "+05:30" into minutes.

    An empty value means UTC.

    Raises:
        ValueError: If the offset cannot be parsed or exceeds 14 hours
    """
    if offset is None or not offset.strip():
        return 0

    match = _OFFSET_RE.match(offset.strip())
    if match is None:
        raise ValueError(f"Invalid timezone offset: {offset!r}")

    minutes = float(match.group("hours")) * 60
    if match.group("minutes"):
        if "." in match.group("hours"):
            raise ValueError(f"Invalid timezone offset: {offset!r}")
        minutes += int(match.group("minutes"))
    if minutes > 14 * 60:
        raise ValueError(f"Timezone offset out of range: {offset!r}")

    total = int(round(minutes))
    return -total if match.group("sign") == "-" else total


def normalize_date(value: Any) -> str:
    """Render a bucket date as YYYY-MM-DD whatever type the driver returned."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


class StoreDialect:
    """Offset-aware time expressions for one backend.

    Args:
        offset_minutes: Minutes added to UTC for every stored timestamp
    """

    name = ""

    def __init__(self, offset_minutes: int = 0):
        self.offset_minutes = offset_minutes

    def now(self) -> ColumnElement[datetime]:
        """Current offset-adjusted timestamp."""
        return self._shifted(self.offset_minutes)

    def cutoff(self, *, days: int = 0, weeks: int = 0) -> ColumnElement[datetime]:
        """Offset-adjusted timestamp ``days`` + ``weeks`` before now."""
        age_minutes = (days + weeks * 7) * MINUTES_PER_DAY
        return self._shifted(self.offset_minutes - age_minutes)

    def _shifted(self, minutes: int) -> ColumnElement[datetime]:
        raise NotImplementedError

    def hour_of(self, column) -> ColumnElement[int]:
        raise NotImplementedError

    def date_of(self, column) -> ColumnElement[Any]:
        raise NotImplementedError

    def weekday_of(self, column) -> ColumnElement[int]:
        """Day of week with 0 = Sunday ... 6 = Saturday."""
        raise NotImplementedError

    def _insert(self):
        raise NotImplementedError

    def upsert_player_join(self, player_name: str) -> Executable:
        """Insert a player with one join, or bump total_joins and last_join atomically."""
        now = self.now()
        stmt = self._insert()(PlayerStats).values(
            player_name=player_name,
            total_joins=1,
            first_join=now,
            last_join=now,
        )
        return stmt.on_conflict_do_update(
            index_elements=["player_name"],
            set_={
                "total_joins": PlayerStats.total_joins + 1,
                "last_join": self.now(),
            },
        )


class SQLiteDialect(StoreDialect):
    name = "sqlite"

    def _shifted(self, minutes: int) -> ColumnElement[datetime]:
        return func.datetime("now", f"{minutes:+d} minutes", type_=DateTime)

    def hour_of(self, column) -> ColumnElement[int]:
        return cast(func.strftime(literal_column("'%H'"), column), Integer)

    def date_of(self, column) -> ColumnElement[Any]:
        return func.date(column)

    def weekday_of(self, column) -> ColumnElement[int]:
        return cast(func.strftime(literal_column("'%w'"), column), Integer)

    def _insert(self):
        return sqlite.insert


class MySQLDialect(StoreDialect):
    name = "mysql"

    def _shifted(self, minutes: int) -> ColumnElement[datetime]:
        return func.timestampadd(
            literal_column("MINUTE"), minutes, func.utc_timestamp(), type_=DateTime
        )

    def hour_of(self, column) -> ColumnElement[int]:
        return func.hour(column, type_=Integer)

    def date_of(self, column) -> ColumnElement[Any]:
        return func.date(column, type_=Date)

    def weekday_of(self, column) -> ColumnElement[int]:
        # DAYOFWEEK() is 1 = Sunday
        return func.dayofweek(column, type_=Integer) - literal_column("1", Integer)

    def upsert_player_join(self, player_name: str) -> Executable:
        now = self.now()
        stmt = mysql.insert(PlayerStats).values(
            player_name=player_name,
            total_joins=1,
            first_join=now,
            last_join=now,
        )
        return stmt.on_duplicate_key_update(
            total_joins=PlayerStats.total_joins + 1,
            last_join=self.now(),
        )


class PostgreSQLDialect(StoreDialect):
    name = "postgresql"

    def _shifted(self, minutes: int) -> ColumnElement[datetime]:
        utc_now = func.timezone("UTC", func.now(), type_=DateTime)
        return utc_now + literal(timedelta(minutes=minutes), Interval())

    def hour_of(self, column) -> ColumnElement[int]:
        return cast(extract("hour", column), Integer)

    def date_of(self, column) -> ColumnElement[Any]:
        return cast(column, Date)

    def weekday_of(self, column) -> ColumnElement[int]:
        return cast(extract("dow", column), Integer)

    def _insert(self):
        return postgresql.insert


_DIALECTS: dict[str, type[StoreDialect]] = {
    cls.name: cls for cls in (SQLiteDialect, MySQLDialect, PostgreSQLDialect)
}


def get_dialect(backend_name: str, offset_minutes: int = 0) -> StoreDialect:
    """Get the StoreDialect for a SQLAlchemy dialect name.

    Raises:
        ValueError: If the backend is not supported
    """
    try:
        return _DIALECTS[backend_name](offset_minutes)
    except KeyError:
        raise ValueError(f"Unsupported database backend: {backend_name}") from None
