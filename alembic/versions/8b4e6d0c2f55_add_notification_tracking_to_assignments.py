"""add notification tracking to assignments

Revision ID: 8b4e6d0c2f55
Revises: 3f1c2a9d7b10
Create Date: 2026-02-19 16:40:07.502913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b4e6d0c2f55'
down_revision: Union[str, Sequence[str], None] = '3f1c2a9d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Nullable: existing rows were never attempted
    op.add_column(
        "assignments",
        sa.Column("notification_sent", sa.Boolean(), nullable=True),
    )
    op.add_column(
        "assignments",
        sa.Column("notification_error", sa.Text(), nullable=True),
    )


def downgrade() -> None:
    with op.batch_alter_table("assignments") as batch_op:
        batch_op.drop_column("notification_error")
        batch_op.drop_column("notification_sent")
