import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

from online_monitor.config import DatabaseSettings, Settings
from online_monitor.db import connect, migrate


@asynccontextmanager
async def temporary_database(timezone_offset: str = "+3"):
    """Connected and migrated database in a temporary SQLite file."""
    temp_db = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    temp_db_path = Path(temp_db.name)
    temp_db.close()

    database = await connect(
        f"sqlite:///{temp_db_path}", timezone_offset=timezone_offset
    )
    try:
        await migrate(database)
        yield database
    finally:
        await database.dispose()
        temp_db_path.unlink(missing_ok=True)


@pytest.fixture
async def database():
    async with temporary_database() as db:
        yield db


@pytest.fixture
def temp_db_path():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "statistics.db"


@pytest.fixture
def monitor_settings(temp_db_path):
    return Settings(
        database=DatabaseSettings(sqlite_path=temp_db_path),
        timezone_offset="+3",
        write_workers=2,
        write_queue_size=100,
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
