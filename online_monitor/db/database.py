"""Connection pool and schema migrations."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator, Optional

from alembic import command
from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import select, text
from sqlalchemy.engine import URL, Connection, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import DatabaseSettings, DatabaseType, PoolSettings
from ..exceptions import ConnectFailed, MigrationFailed
from ..logger import logger
from .dialects import StoreDialect, get_dialect, parse_timezone_offset

MIGRATIONS_PATH = Path(__file__).parent / "migrations"

# Sync driver names map to the async driver used for the pool
_ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "mysql": "mysql+aiomysql",
    "mysql+pymysql": "mysql+aiomysql",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
}

_DEFAULT_PORTS = {DatabaseType.MYSQL: 3306, DatabaseType.POSTGRESQL: 5432}


def database_url_from_settings(database: DatabaseSettings) -> str:
    """Build the database URL from the database config section."""
    if database.url:
        return database.url

    if database.type == DatabaseType.SQLITE:
        path = database.sqlite_path.expanduser().absolute()
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path}"

    url = URL.create(
        drivername=database.type.value,
        username=database.user,
        password=database.password or None,
        host=database.host,
        port=database.port or _DEFAULT_PORTS[database.type],
        database=database.name,
    )
    return url.render_as_string(hide_password=False)


def to_async_url(dsn: str) -> str:
    """Rewrite a database URL to use the matching async driver."""
    url = make_url(dsn)
    driver = _ASYNC_DRIVERS.get(url.drivername)
    if driver is None:
        return dsn
    return url.set(drivername=driver).render_as_string(hide_password=False)


@dataclass
class Database:
    """A pooled async engine plus the dialect helpers bound to it."""

    engine: AsyncEngine
    sessionmaker: async_sessionmaker[AsyncSession]
    dialect: StoreDialect

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async database session from the pool."""
        async with self.sessionmaker() as session:
            yield session

    async def current_time(self) -> datetime:
        """Offset-adjusted "now" as the backend computes it."""
        async with self.session() as session:
            result = await session.execute(select(self.dialect.now()))
            return result.scalar_one()

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connection pool closed")


def _pool_arguments(url: str, pool: PoolSettings) -> dict:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        # In-memory SQLite runs on a single static connection
        return {}
    return {
        "pool_size": pool.size,
        "max_overflow": pool.max_overflow,
        "pool_timeout": pool.timeout_seconds,
        "pool_recycle": pool.recycle_seconds,
        "pool_pre_ping": True,
    }


async def connect(
    dsn: str,
    timezone_offset: str = "",
    pool: Optional[PoolSettings] = None,
    echo: bool = False,
) -> Database:
    """Create the connection pool and verify the backend is reachable.

    Args:
        dsn: SQLAlchemy database URL (sync driver names are upgraded to async ones)
        timezone_offset: Offset applied to every stored timestamp, e.g. "+3"
        pool: Pool sizing; exhaustion raises SQLAlchemy's TimeoutError after pool.timeout_seconds
        echo: Log every SQL statement

    Returns:
        Connected Database

    Raises:
        ConnectFailed: If the URL, the offset or the backend is unusable
    """
    pool = pool or PoolSettings()
    try:
        offset_minutes = parse_timezone_offset(timezone_offset)
        async_url = to_async_url(dsn)
        engine = create_async_engine(
            async_url, echo=echo, **_pool_arguments(async_url, pool)
        )
        dialect = get_dialect(engine.dialect.name, offset_minutes)
    except Exception as e:
        raise ConnectFailed(f"Invalid database configuration: {e}") from e

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        await engine.dispose()
        raise ConnectFailed(f"Could not connect to {dialect.name} database: {e}") from e

    logger.info(
        f"Connected to {dialect.name} database "
        f"(pool_size={pool.size}, offset={offset_minutes:+d} min)"
    )

    sessionmaker = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    return Database(engine=engine, sessionmaker=sessionmaker, dialect=dialect)


def _alembic_config() -> AlembicConfig:
    config = AlembicConfig()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    return config


def _revision_depth(script: ScriptDirectory, revision: Optional[str]) -> int:
    if revision is None:
        return 0
    # walk_revisions() yields head first
    order = [rev.revision for rev in script.walk_revisions()]
    return len(order) - order.index(revision)


def _upgrade_to_head(connection: Connection, config: AlembicConfig) -> int:
    script = ScriptDirectory.from_config(config)
    before = MigrationContext.configure(connection).get_current_revision()

    config.attributes["connection"] = connection
    command.upgrade(config, "head")

    after = MigrationContext.configure(connection).get_current_revision()
    logger.info(f"Current schema version: {after}")
    return _revision_depth(script, after) - _revision_depth(script, before)


async def migrate(database: Database) -> int:
    """Bring the schema to the latest revision.

    Safe to run on every start: applied revisions are recorded in the
    alembic_version table and skipped.

    Returns:
        Number of migrations applied (0 if the schema was already current)

    Raises:
        MigrationFailed: If any revision fails; the process must not start
    """
    logger.info("Starting database migration...")
    try:
        async with database.engine.begin() as conn:
            applied = await conn.run_sync(_upgrade_to_head, _alembic_config())
    except Exception as e:
        logger.critical(f"Failed to run database migrations: {e}", exc_info=True)
        raise MigrationFailed(
            "Database migration failed. Check database configuration and migrations."
        ) from e

    if applied:
        logger.info(f"Successfully applied {applied} migration(s)")
    else:
        logger.info("Database schema is up to date - no migrations needed")
    return applied
