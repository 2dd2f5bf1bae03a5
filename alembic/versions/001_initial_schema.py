"""Initial schema: one table per record kind, plus single-active indexes.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # -- Sector shares with sub-sector detail --
    op.create_table(
        "gdp_shares",
        sa.Column("record_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("total_gdp", sa.Float, nullable=False),
        sa.Column("services_share", sa.Float, nullable=False),
        sa.Column("industry_share", sa.Float, nullable=False),
        sa.Column("agriculture_share", sa.Float, nullable=False),
        sa.Column("taxes_share", sa.Float, nullable=False),
        sa.Column("services_sub_shares", JSONB, nullable=True),
        sa.Column("agriculture_sub_shares", JSONB, nullable=True),
        sa.Column("industry_sub_shares", JSONB, nullable=True),
        sa.Column("private_sector", sa.Float, nullable=True),
        sa.Column("government_sector", sa.Float, nullable=True),
        sa.Column("imports", sa.Float, nullable=True),
        sa.Column("exports", sa.Float, nullable=True),
        *_timestamps(),
    )

    # -- Share by sector (ACTIVE SINGLETON) --
    op.create_table(
        "gdp_share_by_sector",
        sa.Column("record_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("total_gdp", sa.Float, nullable=False),
        sa.Column("service", sa.Float, nullable=False),
        sa.Column("agriculture", sa.Float, nullable=False),
        sa.Column("tax", sa.Float, nullable=False),
        sa.Column("industry", sa.Float, nullable=False),
        sa.Column("is_active", sa.Boolean, server_default="false", nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "uq_gdp_share_by_sector_single_active",
        "gdp_share_by_sector",
        ["is_active"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    # -- GDP records (ACTIVE SINGLETON) --
    op.create_table(
        "gdp_records",
        sa.Column("record_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("quarter", sa.String(2), nullable=False),
        sa.Column("amount_billion_rwf", sa.Float, nullable=False),
        sa.Column("is_active", sa.Boolean, server_default="false", nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "uq_gdp_records_single_active",
        "gdp_records",
        ["is_active"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    # -- Previous vs current period --
    op.create_table(
        "gdp_current_price",
        sa.Column("record_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("last_year", JSONB, nullable=False),
        sa.Column("current_year", JSONB, nullable=False),
        sa.Column("trends", JSONB, nullable=False),
        *_timestamps(),
    )

    # -- Targets --
    op.create_table(
        "no_poverty_targets",
        sa.Column("record_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("target_name", sa.String(255), nullable=False),
        sa.Column("target_description", sa.Text, nullable=True),
        sa.Column("target_percentage", sa.Float, nullable=True),
        sa.Column("source", sa.String(500), nullable=True),
        sa.Column("trend", JSONB, nullable=False),
        sa.Column("map", JSONB, nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("no_poverty_targets")
    op.drop_table("gdp_current_price")
    op.drop_index("uq_gdp_records_single_active", table_name="gdp_records")
    op.drop_table("gdp_records")
    op.drop_index("uq_gdp_share_by_sector_single_active", table_name="gdp_share_by_sector")
    op.drop_table("gdp_share_by_sector")
    op.drop_table("gdp_shares")
