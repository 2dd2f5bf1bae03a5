"""GDP growth by sector at constant prices.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "gdp_growth_by_sector",
        sa.Column("record_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("total_gdp", sa.Float, nullable=False),
        sa.Column("services_share", sa.Float, nullable=False),
        sa.Column("industry_share", sa.Float, nullable=False),
        sa.Column("agriculture_share", sa.Float, nullable=False),
        sa.Column("taxes_share", sa.Float, nullable=False),
        sa.Column("services_sub_shares", JSONB, nullable=True),
        sa.Column("agriculture_sub_shares", JSONB, nullable=True),
        sa.Column("industry_sub_shares", JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("gdp_growth_by_sector")
