"""create agents and assignments

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-02-03 10:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("wa_number", sa.String(), nullable=False, unique=True),
        sa.Column("phone_number_id", sa.String(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_assigned_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_agents_active", "agents", ["active"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("lead_phone", sa.String(), nullable=False),
        sa.Column("lead_name", sa.String(), nullable=True),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=False),
        sa.Column("message_text", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_assignments_lead_phone", "assignments", ["lead_phone"])


def downgrade() -> None:
    op.drop_index("idx_assignments_lead_phone", table_name="assignments")
    op.drop_table("assignments")
    op.drop_index("idx_agents_active", table_name="agents")
    op.drop_table("agents")
