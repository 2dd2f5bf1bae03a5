"""Record payloads and stored records for every record kind.

``*Data`` models are the wire payloads (camelCase on the wire). They only
enforce structure and types; bounds, sums and taxonomy are checked by
``econboard.validation.shares`` so that the wizards and the gateway report
the same violations. ``*Record`` models add identity and timestamps.

Numeric fields are strict: ``"46"`` or ``true`` in a percentage is a
MALFORMED payload, not 46.0 or 1.0. JSON integers are still accepted for
float fields.
"""

from pydantic import Field, StrictBool, StrictFloat, StrictInt

from econboard.models.common import EconBase, Quarter, UTCTimestamp, UUIDv7


class StoredMixin(EconBase):
    """Identity and timestamps assigned by the gateway."""

    record_id: UUIDv7 = Field(..., alias="id")
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Sector shares
# ---------------------------------------------------------------------------


class SectorBreakdownData(EconBase):
    """Total GDP split over the four partition shares, with sub-sector detail."""

    total_gdp: StrictFloat
    services_share: StrictFloat
    industry_share: StrictFloat
    agriculture_share: StrictFloat
    taxes_share: StrictFloat
    services_sub_shares: dict[str, StrictFloat] | None = None
    agriculture_sub_shares: dict[str, StrictFloat] | None = None
    industry_sub_shares: dict[str, StrictFloat] | None = None


class SectorShareData(SectorBreakdownData):
    """One snapshot of the economy's sector decomposition."""

    private_sector: StrictFloat | None = None
    government_sector: StrictFloat | None = None
    imports: StrictFloat | None = None
    exports: StrictFloat | None = None


class SectorShareRecord(SectorShareData, StoredMixin):
    pass


class SectorGrowthData(SectorBreakdownData):
    """GDP growth by sector at constant prices."""


class SectorGrowthRecord(SectorGrowthData, StoredMixin):
    pass


class SectorSnapshotData(EconBase):
    """Yearly share-by-sector figures; one may be active."""

    year: StrictInt
    total_gdp: StrictFloat
    service: StrictFloat
    agriculture: StrictFloat
    tax: StrictFloat
    industry: StrictFloat
    is_active: StrictBool = False


class SectorSnapshotRecord(SectorSnapshotData, StoredMixin):
    pass


# ---------------------------------------------------------------------------
# Period amounts
# ---------------------------------------------------------------------------


class PeriodAmountData(EconBase):
    """GDP amount for one (year, quarter); one may be active."""

    year: StrictInt
    quarter: Quarter
    amount_billion_rwf: StrictFloat
    is_active: StrictBool = False


class PeriodAmountRecord(PeriodAmountData, StoredMixin):
    pass


class PeriodMoney(EconBase):
    year: StrictInt
    quarter: Quarter
    money: StrictFloat


class PeriodComparisonData(EconBase):
    """Previous vs current period GDP with optional trend points."""

    last_year: PeriodMoney
    current_year: PeriodMoney
    trends: list[PeriodMoney] = Field(default_factory=list)


class PeriodComparisonRecord(PeriodComparisonData, StoredMixin):
    pass


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


class TrendPoint(EconBase):
    year: StrictInt
    percentage: StrictFloat


class MapPoint(EconBase):
    year: StrictInt
    location: str
    poverty_rate: StrictFloat


class TargetData(EconBase):
    """Poverty / SDG-style target. trend and map are append-only."""

    target_name: str
    target_description: str | None = None
    target_percentage: StrictFloat | None = None
    source: str | None = None
    trend: list[TrendPoint] = Field(default_factory=list)
    map: list[MapPoint] = Field(default_factory=list)


class TargetRecord(TargetData, StoredMixin):
    pass
