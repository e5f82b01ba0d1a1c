"""add schedules.employee_id foreign key

Existing rows keep employee_id NULL; run scripts/reconcile_shift_employees.py
once to backfill them from employee_name.

Revision ID: 0002
Revises: 0001
Create Date: 2024-05-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("schedules") as batch:
        batch.add_column(sa.Column("employee_id", sa.Integer(), nullable=True))
        batch.create_foreign_key(
            "fk_schedules_employee_id",
            "employees",
            ["employee_id"],
            ["id"],
            ondelete="SET NULL",
        )
        batch.create_index("ix_schedules_employee_id", ["employee_id"], unique=False)


def downgrade() -> None:
    with op.batch_alter_table("schedules") as batch:
        batch.drop_index("ix_schedules_employee_id")
        batch.drop_constraint("fk_schedules_employee_id", type_="foreignkey")
        batch.drop_column("employee_id")
