"""Concrete data-entry wizards.

- GDP amount:           2 steps, previous then current period; submits a
                        PERIOD_COMPARISON record
- Sector shares:        3 steps, total GDP, services + agriculture, taxes +
                        industry; submits a SECTOR_SHARE record
- Private/government:   2 steps, private + government, imports + exports;
                        updates the auxiliary fields of a SECTOR_SHARE record
- Growth by sector:     2 steps, one sector's percentage, then its
                        sub-categories; updates a SECTOR_GROWTH record

Form fields hold raw user input (numbers or numeric strings). Step rules
come from ``econboard.validation.shares``, the same checks the gateway
re-runs on save.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from econboard.config.settings import Settings, get_settings
from econboard.errors import Violation
from econboard.models.common import RecordKind, Sector
from econboard.models.records import SectorShareData
from econboard.records.gateway import RecordGateway, violations_from_pydantic
from econboard.validation.rules import SECTOR_SHARE_FIELDS, SUBSECTOR_FIELDS
from econboard.validation.shares import (
    check_percentage,
    check_period,
    check_positive,
    check_subsector,
    parse_number,
    validate_period_order,
    validate_share_record,
    validate_sum_at_most,
    validate_sum_to_100,
)
from econboard.wizard.machine import StepWizard, WizardStep


def _number(value: Any) -> float:
    """Numeric value of an input that already passed its step check."""
    number, _ = parse_number(value, field="value")
    return number


def _timeout(settings: Settings | None) -> float | None:
    return (settings or get_settings()).SUBMIT_TIMEOUT_SECONDS


# ---------------------------------------------------------------------------
# GDP amount (previous vs current period)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GdpAmountForm:
    last_year: Any = None
    last_quarter: Any = None
    last_amount: Any = None
    current_year: Any = None
    current_quarter: Any = None
    current_amount: Any = None


def validate_previous_period(form: GdpAmountForm) -> list[Violation]:
    return check_period(form.last_year, form.last_quarter, form.last_amount, prefix="last_year")


def validate_current_period(form: GdpAmountForm) -> list[Violation]:
    """Current period fields, and strictly later than the previous period."""
    violations = check_period(
        form.current_year, form.current_quarter, form.current_amount, prefix="current_year"
    )
    if violations or validate_previous_period(form):
        return violations
    order = validate_period_order(
        int(_number(form.last_year)),
        int(_number(form.current_year)),
        field="current_year.year",
    )
    return [order] if order else []


def gdp_amount_payload(form: GdpAmountForm) -> dict:
    return {
        "lastYear": {
            "year": int(_number(form.last_year)),
            "quarter": str(form.last_quarter),
            "money": _number(form.last_amount),
        },
        "currentYear": {
            "year": int(_number(form.current_year)),
            "quarter": str(form.current_quarter),
            "money": _number(form.current_amount),
        },
        "trends": [],
    }


def gdp_amount_wizard(
    gateway: RecordGateway, *, settings: Settings | None = None
) -> StepWizard[GdpAmountForm, BaseModel]:
    async def save(form: GdpAmountForm) -> BaseModel:
        return await gateway.create(RecordKind.PERIOD_COMPARISON, gdp_amount_payload(form))

    return StepWizard(
        name="gdp-amount",
        steps=[
            WizardStep("Previous Year GDP Data", validate_previous_period),
            WizardStep("Current/Next Year GDP Data", validate_current_period),
        ],
        initial=GdpAmountForm,
        action=save,
        timeout=_timeout(settings),
    )


# ---------------------------------------------------------------------------
# Sector shares
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SectorShareForm:
    total_gdp: Any = None
    services_share: Any = None
    agriculture_share: Any = None
    taxes_share: Any = None
    industry_share: Any = None
    services_sub_shares: Mapping[str, Any] = field(default_factory=dict)
    agriculture_sub_shares: Mapping[str, Any] = field(default_factory=dict)
    industry_sub_shares: Mapping[str, Any] = field(default_factory=dict)


def validate_total_gdp(form: SectorShareForm) -> list[Violation]:
    return check_positive(form.total_gdp, field="total_gdp")


def validate_primary_sectors(form: SectorShareForm) -> list[Violation]:
    """Services and agriculture in range, together at most 100%."""
    violations = [
        *check_percentage(form.services_share, field="services_share"),
        *check_percentage(form.agriculture_share, field="agriculture_share"),
    ]
    if not violations:
        over = validate_sum_at_most(
            [_number(form.services_share), _number(form.agriculture_share)],
            field="services_and_agriculture",
        )
        if over is not None:
            violations.append(over)
    violations.extend(check_subsector(Sector.SERVICES, form.services_sub_shares))
    violations.extend(check_subsector(Sector.AGRICULTURE, form.agriculture_sub_shares))
    return violations


def validate_remaining_sectors(form: SectorShareForm) -> list[Violation]:
    """Taxes and industry in range; all four shares sum to 100%."""
    violations = [
        *check_percentage(form.taxes_share, field="taxes_share"),
        *check_percentage(form.industry_share, field="industry_share"),
    ]
    violations.extend(check_subsector(Sector.INDUSTRY, form.industry_sub_shares))
    if violations:
        return violations
    earlier = [
        *check_percentage(form.services_share, field="services_share"),
        *check_percentage(form.agriculture_share, field="agriculture_share"),
    ]
    if earlier:
        return earlier
    mismatch = validate_sum_to_100(
        [
            _number(form.services_share),
            _number(form.industry_share),
            _number(form.agriculture_share),
            _number(form.taxes_share),
        ],
        field="sector_shares",
    )
    return [mismatch] if mismatch else []


def sector_share_payload(form: SectorShareForm) -> dict:
    def sub_shares(mapping: Mapping[str, Any]) -> dict[str, float] | None:
        return {key: _number(value) for key, value in mapping.items()} if mapping else None

    return {
        "totalGdp": _number(form.total_gdp),
        "servicesShare": _number(form.services_share),
        "industryShare": _number(form.industry_share),
        "agricultureShare": _number(form.agriculture_share),
        "taxesShare": _number(form.taxes_share),
        "servicesSubShares": sub_shares(form.services_sub_shares),
        "agricultureSubShares": sub_shares(form.agriculture_sub_shares),
        "industrySubShares": sub_shares(form.industry_sub_shares),
    }


def validate_sector_share_form(form: SectorShareForm) -> list[Violation]:
    """Cumulative check over the whole form, identical to the gateway rule."""
    try:
        data = SectorShareData.model_validate(sector_share_payload(form))
    except PydanticValidationError as exc:
        return violations_from_pydantic(exc)
    return validate_share_record(data)


def sector_share_wizard(
    gateway: RecordGateway, *, settings: Settings | None = None
) -> StepWizard[SectorShareForm, BaseModel]:
    async def save(form: SectorShareForm) -> BaseModel:
        return await gateway.create(RecordKind.SECTOR_SHARE, sector_share_payload(form))

    return StepWizard(
        name="sector-shares",
        steps=[
            WizardStep("Total GDP Input", validate_total_gdp),
            WizardStep("Primary Sectors", validate_primary_sectors),
            WizardStep("Remaining Sectors", validate_remaining_sectors),
        ],
        initial=SectorShareForm,
        action=save,
        final_check=validate_sector_share_form,
        timeout=_timeout(settings),
    )


# ---------------------------------------------------------------------------
# Private / government and trade
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PrivateGovernmentForm:
    private_sector: Any = None
    government_sector: Any = None
    imports: Any = None
    exports: Any = None


def validate_ownership_split(form: PrivateGovernmentForm) -> list[Violation]:
    return [
        *check_percentage(form.private_sector, field="private_sector"),
        *check_percentage(form.government_sector, field="government_sector"),
    ]


def validate_trade(form: PrivateGovernmentForm) -> list[Violation]:
    return [
        *check_percentage(form.imports, field="imports"),
        *check_percentage(form.exports, field="exports"),
    ]


def validate_private_government_form(form: PrivateGovernmentForm) -> list[Violation]:
    return [*validate_ownership_split(form), *validate_trade(form)]


def private_government_payload(form: PrivateGovernmentForm) -> dict:
    return {
        "privateSector": _number(form.private_sector),
        "governmentSector": _number(form.government_sector),
        "imports": _number(form.imports),
        "exports": _number(form.exports),
    }


def private_government_wizard(
    gateway: RecordGateway, record_id: UUID, *, settings: Settings | None = None
) -> StepWizard[PrivateGovernmentForm, BaseModel]:
    """Wizard bound to an existing sector-share record."""

    async def save(form: PrivateGovernmentForm) -> BaseModel:
        return await gateway.update(RecordKind.SECTOR_SHARE, record_id, private_government_payload(form))

    return StepWizard(
        name="private-government",
        steps=[
            WizardStep("Private vs Government", validate_ownership_split),
            WizardStep("Trade Data", validate_trade),
        ],
        initial=PrivateGovernmentForm,
        action=save,
        final_check=validate_private_government_form,
        timeout=_timeout(settings),
    )


# ---------------------------------------------------------------------------
# Growth by sector (one sector at a time)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SectorGrowthForm:
    share: Any = None
    sub_shares: Mapping[str, Any] = field(default_factory=dict)


def sector_growth_payload(sector: Sector, form: SectorGrowthForm) -> dict:
    """Partial update touching only ``sector``'s share and sub-share map."""
    sub_shares = {key: _number(value) for key, value in form.sub_shares.items()}
    return {
        SECTOR_SHARE_FIELDS[sector]: _number(form.share),
        SUBSECTOR_FIELDS[sector]: sub_shares or None,
    }


def sector_growth_wizard(
    gateway: RecordGateway,
    record_id: UUID,
    sector: Sector,
    *,
    settings: Settings | None = None,
) -> StepWizard[SectorGrowthForm, BaseModel]:
    """Edit one sector of an existing growth-by-sector record.

    The main percentage and each sub-category percentage must be in
    [0, 100], sub-categories must belong to the sector's taxonomy. The
    gateway re-checks the whole record on save, so a main percentage that
    breaks the sum-to-100 rule is rejected there and the input is kept.
    """
    share_field = SECTOR_SHARE_FIELDS[sector]

    def validate_share(form: SectorGrowthForm) -> list[Violation]:
        return check_percentage(form.share, field=share_field)

    def validate_sub_shares(form: SectorGrowthForm) -> list[Violation]:
        return check_subsector(sector, form.sub_shares)

    def validate_form(form: SectorGrowthForm) -> list[Violation]:
        return [*validate_share(form), *validate_sub_shares(form)]

    async def save(form: SectorGrowthForm) -> BaseModel:
        return await gateway.update(
            RecordKind.SECTOR_GROWTH, record_id, sector_growth_payload(sector, form)
        )

    return StepWizard(
        name=f"sector-growth-{sector.value}",
        steps=[
            WizardStep("Sector Percentage", validate_share),
            WizardStep("Sub-categories", validate_sub_shares),
        ],
        initial=SectorGrowthForm,
        action=save,
        final_check=validate_form,
        timeout=_timeout(settings),
    )
