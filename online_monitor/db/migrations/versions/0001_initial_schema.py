"""Initial schema: server aggregate, player stats, sessions, snapshots

Revision ID: 0001
Revises:
Create Date: 2026-09-14 18:02:11.408113

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    server_stats = op.create_table(
        "server_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("max_online", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "total_unique_players", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.func.current_timestamp(),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.bulk_insert(
        server_stats, [{"id": 1, "max_online": 0, "total_unique_players": 0}]
    )

    op.create_table(
        "player_stats",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("player_name", sa.String(length=64), nullable=False),
        sa.Column("total_joins", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_playtime", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("first_join", sa.DateTime(), nullable=True),
        sa.Column("last_join", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_name", name="uq_player_stats_player_name"),
    )

    op.create_table(
        "player_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("player_name", sa.String(length=64), nullable=False),
        sa.Column("join_time", sa.DateTime(), nullable=False),
        sa.Column("quit_time", sa.DateTime(), nullable=True),
        sa.Column("session_duration", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "online_snapshots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("online_count", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("online_snapshots")
    op.drop_table("player_sessions")
    op.drop_table("player_stats")
    op.drop_table("server_stats")
