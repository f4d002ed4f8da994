"""initial schema

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3f1c9a2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("company_id", sa.Integer, nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("tax_exempt", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("tax_rate", sa.String(32), nullable=True),
        sa.Column("payment_terms", sa.String(20), nullable=False, server_default="NET_30"),
        sa.Column("billing_display_mode", sa.String(20), nullable=False, server_default="itemized"),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "facility_profiles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("client_id", sa.Integer, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location_id", sa.String(255), nullable=False),
        sa.Column("location_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("normal_frequency_per_week", sa.Integer, nullable=False, server_default="0"),
        sa.Column("normal_days_of_week", sa.String(32), nullable=False, server_default=""),
        sa.Column("default_monthly_rate", sa.String(32), nullable=False, server_default="0"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("tax_behavior", sa.String(20), nullable=False, server_default="INHERIT_CLIENT"),
        sa.Column("seasonal_rules_enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("client_id", "location_id", name="uq_facility_profiles_client_location"),
    )

    op.create_table(
        "seasonal_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "facility_profile_id",
            sa.Integer,
            sa.ForeignKey("facility_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("active_months", sa.String(64), nullable=True),
        sa.Column("paused_months", sa.String(64), nullable=True),
        sa.Column("effective_year_start", sa.Integer, nullable=True),
        sa.Column("effective_year_end", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "monthly_overrides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column(
            "facility_profile_id",
            sa.Integer,
            sa.ForeignKey("facility_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("override_status", sa.String(20), nullable=True),
        sa.Column("override_frequency", sa.Integer, nullable=True),
        sa.Column("override_days_of_week", sa.String(32), nullable=True),
        sa.Column("override_rate", sa.String(32), nullable=True),
        sa.Column("override_notes", sa.Text, nullable=True),
        sa.Column("pause_start_day", sa.Integer, nullable=True),
        sa.Column("pause_end_day", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("facility_profile_id", "year", "month", name="uq_monthly_overrides_period"),
    )

    op.create_table(
        "service_line_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("client_id", sa.Integer, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "facility_profile_id",
            sa.Integer,
            sa.ForeignKey("facility_profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("quantity", sa.String(32), nullable=False, server_default="1"),
        sa.Column("unit_rate", sa.String(32), nullable=False),
        sa.Column("tax_behavior", sa.String(20), nullable=False, server_default="INHERIT_CLIENT"),
        sa.Column("performed_date", sa.String(10), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_service_line_items_period", "service_line_items", ["client_id", "year", "month"])


def downgrade() -> None:
    op.drop_index("ix_service_line_items_period", table_name="service_line_items")
    op.drop_table("service_line_items")
    op.drop_table("monthly_overrides")
    op.drop_table("seasonal_rules")
    op.drop_table("facility_profiles")
    op.drop_table("clients")
