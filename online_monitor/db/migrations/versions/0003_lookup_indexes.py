"""Index snapshot timestamps and open-session lookups

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-06 09:15:52.630477

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0003"
down_revision: Union[str, Sequence[str], None] = "0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_index(
        "idx_online_snapshots_timestamp", "online_snapshots", ["timestamp"]
    )
    op.create_index(
        "idx_player_sessions_player_open",
        "player_sessions",
        ["player_name", "quit_time"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_player_sessions_player_open", table_name="player_sessions")
    op.drop_index("idx_online_snapshots_timestamp", table_name="online_snapshots")
