"""Add weekday sets and the weekdays/weekends/custom schedule kinds.

Existing rows keep ``days = NULL``; the application reads them as the legacy
schedule generation.

Revision ID: 20251211_000002
Revises: 20251204_000001
Create Date: 2025-12-11
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20251211_000002"
down_revision = "20251204_000001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("habit") as batch_op:
        batch_op.add_column(sa.Column("days", sa.String(length=20), nullable=True))
        batch_op.drop_constraint("ck_habit_frequency", type_="check")
        batch_op.create_check_constraint(
            "ck_habit_frequency",
            "frequency IN ('daily', 'weekdays', 'weekends', 'custom', 'weekly')",
        )


def downgrade() -> None:
    # 日本語: 新形式の行は daily に戻してから制約を復元 / English: Fold new-style rows back to daily before restoring the old check
    op.execute("UPDATE habit SET frequency = 'daily' WHERE frequency NOT IN ('daily', 'weekly')")
    with op.batch_alter_table("habit") as batch_op:
        batch_op.drop_constraint("ck_habit_frequency", type_="check")
        batch_op.create_check_constraint("ck_habit_frequency", "frequency IN ('daily', 'weekly')")
        batch_op.drop_column("days")
