"""initial schema: employees, schedules, holidays, events

Revision ID: 0001
Revises:
Create Date: 2024-03-02
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=160), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_employees_name", "employees", ["name"], unique=False)
    op.create_index("ix_employees_email", "employees", ["email"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=32), nullable=True),
        sa.Column("setup_time", sa.String(length=32), nullable=True),
        sa.Column("duration", sa.String(length=64), nullable=True),
        sa.Column("contact_name", sa.String(length=128), nullable=True),
        sa.Column("contact_phone", sa.String(length=40), nullable=True),
        sa.Column("expected_attendees", sa.Integer(), nullable=True),
        sa.Column("event_type", sa.String(length=32), server_default="tasting", nullable=False),
        sa.Column("event_type_other", sa.String(length=128), nullable=True),
        sa.Column("event_instructions", sa.Text(), nullable=True),
        sa.Column("off_prem", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("info", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_events_date", "events", ["date"], unique=False)

    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_name", sa.String(length=128), nullable=False),
        sa.Column("day", sa.String(length=3), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("shift", sa.String(length=64), nullable=True),
        sa.Column("event_type", sa.String(length=32), nullable=True),
        sa.Column("event_name", sa.String(length=200), nullable=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_schedules_date", "schedules", ["date"], unique=False)
    op.create_index("ix_schedules_employee_name", "schedules", ["employee_name"], unique=False)

    op.create_table(
        "holidays",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("template", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "event_supplies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("table_needed", sa.Boolean(), nullable=False),
        sa.Column("beer_buckets", sa.Boolean(), nullable=False),
        sa.Column("table_cloth", sa.Boolean(), nullable=False),
        sa.Column("tent_weights", sa.Boolean(), nullable=False),
        sa.Column("signage", sa.Boolean(), nullable=False),
        sa.Column("ice", sa.Boolean(), nullable=False),
        sa.Column("jockey_box", sa.Boolean(), nullable=False),
        sa.Column("cups", sa.Boolean(), nullable=False),
        sa.Column("additional_supplies", sa.Text(), nullable=True),
    )

    op.create_table(
        "event_beers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("beer_style", sa.String(length=128), nullable=False),
        sa.Column("packaging", sa.String(length=16), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
    )
    op.create_index("ix_event_beers_event_id", "event_beers", ["event_id"], unique=False)

    op.create_table(
        "event_notes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("attendance_actual", sa.Integer(), nullable=True),
        sa.Column("beers_sold", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "event_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("event_id", "employee_id", name="uq_event_assignment_event_employee"),
    )
    op.create_index("ix_event_assignments_event_id", "event_assignments", ["event_id"], unique=False)
    op.create_index("ix_event_assignments_employee_id", "event_assignments", ["employee_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_event_assignments_employee_id", table_name="event_assignments")
    op.drop_index("ix_event_assignments_event_id", table_name="event_assignments")
    op.drop_table("event_assignments")
    op.drop_table("event_notes")
    op.drop_index("ix_event_beers_event_id", table_name="event_beers")
    op.drop_table("event_beers")
    op.drop_table("event_supplies")
    op.drop_table("holidays")
    op.drop_index("ix_schedules_employee_name", table_name="schedules")
    op.drop_index("ix_schedules_date", table_name="schedules")
    op.drop_table("schedules")
    op.drop_index("ix_events_date", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_employees_email", table_name="employees")
    op.drop_index("ix_employees_name", table_name="employees")
    op.drop_table("employees")
