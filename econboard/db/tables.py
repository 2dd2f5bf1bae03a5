"""SQLAlchemy ORM table models for econboard.

One table per record kind. Uses FlexJSON (JSONB on Postgres, JSON on
SQLite) for sub-share maps and ordered observation lists.

Categories:
- ACTIVE SINGLETON: PeriodAmount, SectorSnapshot (at most one row with
  is_active = true, enforced by a partial unique index)
- PLAIN: SectorShare, SectorGrowth, Target, PeriodComparison
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from econboard.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


def single_active_index(name: str) -> Index:
    """Partial unique index allowing at most one row with is_active = true."""
    return Index(
        name,
        "is_active",
        unique=True,
        postgresql_where=text("is_active"),
        sqlite_where=text("is_active"),
    )


# ---------------------------------------------------------------------------
# Sector shares
# ---------------------------------------------------------------------------


class SectorShareRow(Base):
    """Sector decomposition snapshot with sub-sector detail."""

    __tablename__ = "gdp_shares"

    record_id: Mapped[UUID] = mapped_column(primary_key=True)
    total_gdp: Mapped[float] = mapped_column(Float, nullable=False)
    services_share: Mapped[float] = mapped_column(Float, nullable=False)
    industry_share: Mapped[float] = mapped_column(Float, nullable=False)
    agriculture_share: Mapped[float] = mapped_column(Float, nullable=False)
    taxes_share: Mapped[float] = mapped_column(Float, nullable=False)
    services_sub_shares = mapped_column(FlexJSON, nullable=True)
    agriculture_sub_shares = mapped_column(FlexJSON, nullable=True)
    industry_sub_shares = mapped_column(FlexJSON, nullable=True)
    private_sector: Mapped[float | None] = mapped_column(Float, nullable=True)
    government_sector: Mapped[float | None] = mapped_column(Float, nullable=True)
    imports: Mapped[float | None] = mapped_column(Float, nullable=True)
    exports: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SectorGrowthRow(Base):
    """GDP growth by sector at constant prices, with sub-sector detail."""

    __tablename__ = "gdp_growth_by_sector"

    record_id: Mapped[UUID] = mapped_column(primary_key=True)
    total_gdp: Mapped[float] = mapped_column(Float, nullable=False)
    services_share: Mapped[float] = mapped_column(Float, nullable=False)
    industry_share: Mapped[float] = mapped_column(Float, nullable=False)
    agriculture_share: Mapped[float] = mapped_column(Float, nullable=False)
    taxes_share: Mapped[float] = mapped_column(Float, nullable=False)
    services_sub_shares = mapped_column(FlexJSON, nullable=True)
    agriculture_sub_shares = mapped_column(FlexJSON, nullable=True)
    industry_sub_shares = mapped_column(FlexJSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SectorSnapshotRow(Base):
    """Yearly share-by-sector figures. ACTIVE SINGLETON."""

    __tablename__ = "gdp_share_by_sector"
    __table_args__ = (single_active_index("uq_gdp_share_by_sector_single_active"),)

    record_id: Mapped[UUID] = mapped_column(primary_key=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_gdp: Mapped[float] = mapped_column(Float, nullable=False)
    service: Mapped[float] = mapped_column(Float, nullable=False)
    agriculture: Mapped[float] = mapped_column(Float, nullable=False)
    tax: Mapped[float] = mapped_column(Float, nullable=False)
    industry: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Period amounts
# ---------------------------------------------------------------------------


class PeriodAmountRow(Base):
    """GDP amount for a single (year, quarter). ACTIVE SINGLETON."""

    __tablename__ = "gdp_records"
    __table_args__ = (single_active_index("uq_gdp_records_single_active"),)

    record_id: Mapped[UUID] = mapped_column(primary_key=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[str] = mapped_column(String(2), nullable=False)
    amount_billion_rwf: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PeriodComparisonRow(Base):
    """Previous vs current period GDP, plus trend observations."""

    __tablename__ = "gdp_current_price"

    record_id: Mapped[UUID] = mapped_column(primary_key=True)
    last_year = mapped_column(FlexJSON, nullable=False)
    current_year = mapped_column(FlexJSON, nullable=False)
    trends = mapped_column(FlexJSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


class TargetRow(Base):
    """Poverty / SDG-style target with append-only trend and map lists."""

    __tablename__ = "no_poverty_targets"

    record_id: Mapped[UUID] = mapped_column(primary_key=True)
    target_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    source: Mapped[str | None] = mapped_column(String(500), nullable=True)
    trend = mapped_column(FlexJSON, nullable=False)
    map = mapped_column(FlexJSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
