"""Add gameplay counters and last activity to player_stats

Revision ID: 0002
Revises: 0001
Create Date: 2026-09-28 21:47:35.112904

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, Sequence[str], None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

COUNTER_COLUMNS = (
    "deaths",
    "mob_kills",
    "player_kills",
    "blocks_broken",
    "blocks_placed",
    "messages_sent",
)


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table("player_stats") as batch_op:
        for name in COUNTER_COLUMNS:
            batch_op.add_column(
                sa.Column(name, sa.Integer(), server_default="0", nullable=False)
            )
        batch_op.add_column(sa.Column("last_activity", sa.DateTime(), nullable=True))


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("player_stats") as batch_op:
        batch_op.drop_column("last_activity")
        for name in reversed(COUNTER_COLUMNS):
            batch_op.drop_column(name)
