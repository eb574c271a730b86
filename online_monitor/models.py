from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models with async support.

    The schema itself is owned by the alembic revisions in ``db/migrations``;
    these mappings must stay in step with them.
    """

    pass


# Timestamps are naive: they hold UTC shifted by the configured timezone
# offset, produced by the backend through StoreDialect.now().


class ServerStats(Base):
    """Server aggregate counters.

    This table only contains one record (id=1), seeded by the first migration.
    """

    __tablename__ = "server_stats"

    id: Mapped[int] = mapped_column(primary_key=True, default=1)
    max_online: Mapped[int] = mapped_column(Integer, default=0)
    total_unique_players: Mapped[int] = mapped_column(Integer, default=0)
    # Backend CURRENT_TIMESTAMP at seeding (UTC on SQLite), not offset-adjusted
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime())


class PlayerCounter(str, Enum):
    """Gameplay counters kept per player."""

    DEATHS = "deaths"
    MOB_KILLS = "mob_kills"
    PLAYER_KILLS = "player_kills"
    BLOCKS_BROKEN = "blocks_broken"
    BLOCKS_PLACED = "blocks_placed"
    MESSAGES_SENT = "messages_sent"


class PlayerStats(Base):
    """Cumulative per-player statistics. Rows are never deleted."""

    __tablename__ = "player_stats"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player_name: Mapped[str] = mapped_column(String(64), unique=True)
    total_joins: Mapped[int] = mapped_column(Integer, default=0)
    # Milliseconds
    total_playtime: Mapped[int] = mapped_column(BigInteger, default=0)
    first_join: Mapped[Optional[datetime]] = mapped_column(DateTime())
    last_join: Mapped[Optional[datetime]] = mapped_column(DateTime())
    last_activity: Mapped[Optional[datetime]] = mapped_column(DateTime())
    deaths: Mapped[int] = mapped_column(Integer, default=0)
    mob_kills: Mapped[int] = mapped_column(Integer, default=0)
    player_kills: Mapped[int] = mapped_column(Integer, default=0)
    blocks_broken: Mapped[int] = mapped_column(Integer, default=0)
    blocks_placed: Mapped[int] = mapped_column(Integer, default=0)
    messages_sent: Mapped[int] = mapped_column(Integer, default=0)


class PlayerSession(Base):
    """One continuous online interval. quit_time is NULL while the session is open."""

    __tablename__ = "player_sessions"
    __table_args__ = (
        Index("idx_player_sessions_player_open", "player_name", "quit_time"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player_name: Mapped[str] = mapped_column(String(64))
    join_time: Mapped[datetime] = mapped_column(DateTime())
    quit_time: Mapped[Optional[datetime]] = mapped_column(DateTime())
    # Milliseconds, set on close
    session_duration: Mapped[Optional[int]] = mapped_column(BigInteger)


class OnlineSnapshot(Base):
    """Periodic sample of the concurrent online count. Insert and age-based delete only."""

    __tablename__ = "online_snapshots"
    __table_args__ = (Index("idx_online_snapshots_timestamp", "timestamp"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    online_count: Mapped[int] = mapped_column(Integer)
    timestamp: Mapped[datetime] = mapped_column(DateTime())


# Pydantic models for read paths (commands, dashboards, notifications)


class PlayerProfile(BaseModel):
    """All persisted counters of a single player."""

    player_name: str
    total_joins: int = 0
    total_playtime_ms: int = 0
    deaths: int = 0
    mob_kills: int = 0
    player_kills: int = 0
    blocks_broken: int = 0
    blocks_placed: int = 0
    messages_sent: int = 0
    first_join: Optional[datetime] = None
    last_join: Optional[datetime] = None
    last_activity: Optional[datetime] = None


class PeakHour(BaseModel):
    """Hour of day with the highest recorded online count."""

    hour_label: str = PydanticField(description='Hour formatted as "HH:00"')
    peak_online: int


class ServerSummary(BaseModel):
    """Server-wide statistics as shown on the dashboard."""

    max_online: int = 0
    unique_players: int = 0
    total_sessions: int = 0
    active_sessions: int = 0
    total_playtime_ms: int = 0
    top_players: dict[str, int] = PydanticField(default_factory=dict)
