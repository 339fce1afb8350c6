"""Initial schema: habits with daily/weekly frequency and their entries.

Revision ID: 20251204_000001
Revises:
Create Date: 2025-12-04
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20251204_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "habit",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("frequency", sa.String(length=20), nullable=False, server_default="daily"),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("frequency IN ('daily', 'weekly')", name="ck_habit_frequency"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_habit_owner_id", "habit", ["owner_id"])
    op.create_table(
        "habit_entry",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["habit_id"], ["habit.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("habit_id", "date", name="uq_habit_entry_habit_date"),
    )


def downgrade() -> None:
    op.drop_table("habit_entry")
    op.drop_index("ix_habit_owner_id", table_name="habit")
    op.drop_table("habit")
