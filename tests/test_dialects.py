"""Tests for timezone offset parsing and per-backend SQL."""

from datetime import date, datetime

import pytest
from sqlalchemy.dialects import mysql, postgresql, sqlite

from online_monitor.db.dialects import (
    MySQLDialect,
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
    normalize_date,
    parse_timezone_offset,
)
from online_monitor.models import OnlineSnapshot


class TestParseTimezoneOffset:
    @pytest.mark.parametrize(
        "offset,minutes",
        [
            ("+3", 180),
            ("3", 180),
            ("-4", -240),
            ("+5.5", 330),
            ("+05:30", 330),
            ("-03:30", -210),
            ("UTC+2", 120),
            ("GMT-1", -60),
            ("+0", 0),
            ("", 0),
            (None, 0),
        ],
    )
    def test_valid_offsets(self, offset, minutes):
        assert parse_timezone_offset(offset) == minutes

    @pytest.mark.parametrize("offset", ["abc", "+3h", "+15", "+5.5:30", "++3"])
    def test_invalid_offsets(self, offset):
        with pytest.raises(ValueError):
            parse_timezone_offset(offset)


def test_normalize_date():
    assert normalize_date(date(2024, 3, 9)) == "2024-03-09"
    assert normalize_date(datetime(2024, 3, 9, 23, 59)) == "2024-03-09"
    assert normalize_date("2024-03-09") == "2024-03-09"


def test_get_dialect():
    assert isinstance(get_dialect("sqlite", 60), SQLiteDialect)
    assert isinstance(get_dialect("mysql"), MySQLDialect)
    assert isinstance(get_dialect("postgresql"), PostgreSQLDialect)
    assert get_dialect("sqlite", 60).offset_minutes == 60

    with pytest.raises(ValueError):
        get_dialect("oracle")


def render(expression, dialect) -> str:
    return str(
        expression.compile(dialect=dialect, compile_kwargs={"literal_binds": True})
    )


class TestRendering:
    def test_sqlite_now_and_cutoff(self):
        dialect = SQLiteDialect(180)
        assert "+180 minutes" in render(dialect.now(), sqlite.dialect())
        # 180 - 2 days
        assert "-2700 minutes" in render(dialect.cutoff(days=2), sqlite.dialect())
        assert "-9900 minutes" in render(dialect.cutoff(weeks=1), sqlite.dialect())

    def test_sqlite_buckets(self):
        dialect = SQLiteDialect()
        assert "'%H'" in render(dialect.hour_of(OnlineSnapshot.timestamp), sqlite.dialect())
        assert "'%w'" in render(
            dialect.weekday_of(OnlineSnapshot.timestamp), sqlite.dialect()
        )

    def test_mysql_weekday_starts_at_sunday(self):
        sql = render(
            MySQLDialect().weekday_of(OnlineSnapshot.timestamp), mysql.dialect()
        ).lower()
        assert "dayofweek(" in sql
        assert "- 1" in sql

    def test_mysql_upsert(self):
        sql = str(MySQLDialect(180).upsert_player_join("Steve").compile(dialect=mysql.dialect()))
        assert "ON DUPLICATE KEY UPDATE" in sql

    def test_postgres_upsert(self):
        sql = str(
            PostgreSQLDialect().upsert_player_join("Steve").compile(
                dialect=postgresql.dialect()
            )
        )
        assert "ON CONFLICT (player_name) DO UPDATE" in sql

    def test_postgres_buckets(self):
        dialect = PostgreSQLDialect()
        hour = render(dialect.hour_of(OnlineSnapshot.timestamp), postgresql.dialect())
        weekday = render(
            dialect.weekday_of(OnlineSnapshot.timestamp), postgresql.dialect()
        )
        assert "EXTRACT(hour" in hour
        assert "EXTRACT(dow" in weekday
