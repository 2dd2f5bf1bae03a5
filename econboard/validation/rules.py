"""Rule table shared by the wizards and the storage boundary.

Bounds, tolerance and the sub-sector taxonomy are fixed at design time.
Both the wizard step validators and the record validators read from here.
"""

from econboard.models.common import Quarter, Sector

# Absolute tolerance for sum-to-100 checks; absorbs rounding from
# amount = total_gdp * share / 100 display conversions.
SHARE_TOLERANCE = 0.01

PERCENT_MIN = 0.0
PERCENT_MAX = 100.0

YEAR_MIN = 1900
YEAR_MAX = 2100

QUARTERS: tuple[str, ...] = tuple(q.value for q in Quarter)

# Shares that partition total GDP, in payload field order.
PARTITION_FIELDS: tuple[str, ...] = (
    "services_share",
    "industry_share",
    "agriculture_share",
    "taxes_share",
)

SNAPSHOT_PARTITION_FIELDS: tuple[str, ...] = ("service", "agriculture", "tax", "industry")

# Independent percentages, no sum requirement.
AUXILIARY_FIELDS: tuple[str, ...] = (
    "private_sector",
    "government_sector",
    "imports",
    "exports",
)

SUBSECTOR_TAXONOMY: dict[Sector, frozenset[str]] = {
    Sector.SERVICES: frozenset({
        "Trade",
        "Transportation",
        "Hotels and Restaurants",
        "Financial Services",
        "Government",
        "Health",
        "Education",
        "ICT",
        "Real Estate",
    }),
    Sector.AGRICULTURE: frozenset({
        "Livestock Products",
        "Export Crops",
        "Forestry",
        "Food Crops",
        "Fisheries",
        "Horticulture",
    }),
    Sector.INDUSTRY: frozenset({
        "Chemical and Plastic Products",
        "Construction",
        "Food Manufacture",
        "Textile & Clothing",
        "Manufacturing",
        "Mining",
        "Energy",
    }),
}

# Primary sector sub-detail is mandatory, secondary sectors' is optional.
SUBSECTOR_REQUIRED: dict[Sector, bool] = {
    Sector.SERVICES: True,
    Sector.AGRICULTURE: False,
    Sector.INDUSTRY: False,
}

SUBSECTOR_FIELDS: dict[Sector, str] = {
    Sector.SERVICES: "services_sub_shares",
    Sector.AGRICULTURE: "agriculture_sub_shares",
    Sector.INDUSTRY: "industry_sub_shares",
}

# Partition share each sub-sector map breaks down.
SECTOR_SHARE_FIELDS: dict[Sector, str] = {
    Sector.SERVICES: "services_share",
    Sector.AGRICULTURE: "agriculture_share",
    Sector.INDUSTRY: "industry_share",
}
