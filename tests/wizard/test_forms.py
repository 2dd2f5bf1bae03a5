"""Tests for the concrete data-entry wizards — econboard/wizard/forms.py.

Each wizard is driven end to end against SqlRecordGateway on the
SAVEPOINT-isolated SQLite session.
"""

from dataclasses import replace

import pytest
from uuid_extensions import uuid7

from econboard.config.settings import Settings
from econboard.errors import RecordNotFoundError, RecordValidationError, ViolationKind
from econboard.models.common import RecordKind, Sector
from econboard.wizard.forms import (
    SectorShareForm,
    SectorGrowthForm,
    gdp_amount_wizard,
    private_government_wizard,
    sector_growth_wizard,
    sector_share_wizard,
    validate_sector_share_form,
)

SETTINGS = Settings(SUBMIT_TIMEOUT_SECONDS=5)


# ===================================================================
# Sector shares
# ===================================================================


class TestSectorShareWizard:
    def _to_step_three(self, wizard) -> None:
        wizard.update(total_gdp="5255")
        assert wizard.next().advanced
        wizard.update(
            services_share="46",
            agriculture_share="23",
            services_sub_shares={"Trade": "19", "ICT": "5"},
        )
        assert wizard.next().advanced

    @pytest.mark.anyio
    async def test_total_gdp_zero_blocks(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        wizard.update(total_gdp=0)
        outcome = wizard.next()
        assert not outcome.advanced
        assert outcome.violations[0].kind == ViolationKind.OUT_OF_RANGE
        assert wizard.current_step == 1

    @pytest.mark.anyio
    async def test_infinite_total_gdp_blocks(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        wizard.update(total_gdp="inf")
        [violation] = wizard.next().violations
        assert violation.kind == ViolationKind.MALFORMED
        assert wizard.current_step == 1

    @pytest.mark.anyio
    async def test_total_gdp_positive_advances(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        wizard.update(total_gdp=5255)
        assert wizard.next().step == 2
        assert wizard.current_title == "Primary Sectors"

    @pytest.mark.anyio
    async def test_services_detail_required(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        wizard.update(total_gdp=5255, services_share=46, agriculture_share=23)
        wizard.next()
        outcome = wizard.next()
        assert not outcome.advanced
        assert [(v.kind, v.field) for v in outcome.violations] == [
            (ViolationKind.MISSING_FIELD, "services_sub_shares"),
        ]

    @pytest.mark.anyio
    async def test_unknown_subsector_blocks(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        wizard.update(
            total_gdp=5255,
            services_share=46,
            agriculture_share=23,
            services_sub_shares={"Trade": 19, "Banking": 5},
        )
        wizard.next()
        outcome = wizard.next()
        assert [v.keys for v in outcome.violations] == [("Banking",)]

    @pytest.mark.anyio
    async def test_primary_sectors_over_100_blocks(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        wizard.update(
            total_gdp=5255,
            services_share=80,
            agriculture_share=30,
            services_sub_shares={"Trade": 19},
        )
        wizard.next()
        outcome = wizard.next()
        assert outcome.violations[0].kind == ViolationKind.SUM_MISMATCH

    @pytest.mark.anyio
    async def test_sum_mismatch_on_last_step(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        self._to_step_three(wizard)
        wizard.update(taxes_share=8, industry_share=24)
        outcome = wizard.next()
        assert not outcome.advanced
        [violation] = outcome.violations
        assert violation.kind == ViolationKind.SUM_MISMATCH
        assert violation.actual_sum == pytest.approx(101)

        with pytest.raises(RecordValidationError):
            await wizard.submit()
        assert wizard.current_step == 3
        assert await gateway.find_all(RecordKind.SECTOR_SHARE) == []

    @pytest.mark.anyio
    async def test_submit_creates_record_and_resets(self, gateway) -> None:
        wizard = sector_share_wizard(gateway, settings=SETTINGS)
        self._to_step_three(wizard)
        wizard.update(taxes_share="7", industry_share="24", industry_sub_shares={"Mining": 3})

        record = await wizard.submit()

        assert record.total_gdp == 5255
        assert record.services_sub_shares == {"Trade": 19, "ICT": 5}
        assert record.industry_sub_shares == {"Mining": 3}
        assert record.agriculture_sub_shares is None
        assert wizard.current_step == 1
        assert wizard.data == SectorShareForm()
        stored = await gateway.find_all(RecordKind.SECTOR_SHARE)
        assert [r.record_id for r in stored] == [record.record_id]

    def test_final_check_matches_record_rules(self) -> None:
        form = SectorShareForm(
            total_gdp=5255,
            services_share=46,
            agriculture_share=23,
            taxes_share=7,
            industry_share=24,
            services_sub_shares={"Trade": 19},
        )
        assert validate_sector_share_form(form) == []
        bad = replace(form, taxes_share=8)
        assert [v.kind for v in validate_sector_share_form(bad)] == [ViolationKind.SUM_MISMATCH]


# ===================================================================
# GDP amount (previous vs current period)
# ===================================================================


class TestGdpAmountWizard:
    def _fill_previous(self, wizard, year=2023) -> None:
        wizard.update(last_year=year, last_quarter="Q4", last_amount="4000")
        assert wizard.next().advanced

    @pytest.mark.anyio
    async def test_previous_period_required(self, gateway) -> None:
        wizard = gdp_amount_wizard(gateway, settings=SETTINGS)
        outcome = wizard.next()
        fields = {v.field for v in outcome.violations}
        assert fields == {"last_year.year", "last_year.quarter", "last_year.amount"}

    @pytest.mark.anyio
    async def test_year_out_of_range(self, gateway) -> None:
        wizard = gdp_amount_wizard(gateway, settings=SETTINGS)
        wizard.update(last_year=1899, last_quarter="Q1", last_amount=10)
        [violation] = wizard.next().violations
        assert violation.field == "last_year.year"
        assert violation.kind == ViolationKind.OUT_OF_RANGE

    @pytest.mark.anyio
    async def test_current_before_previous_rejected(self, gateway) -> None:
        wizard = gdp_amount_wizard(gateway, settings=SETTINGS)
        self._fill_previous(wizard, year=2024)
        wizard.update(current_year=2023, current_quarter="Q1", current_amount=4200)

        with pytest.raises(RecordValidationError) as exc_info:
            await wizard.submit()

        assert exc_info.value.kinds == {ViolationKind.ORDERING_VIOLATION}
        assert wizard.current_step == 2
        assert wizard.data.current_year == 2023
        assert await gateway.find_all(RecordKind.PERIOD_COMPARISON) == []

    @pytest.mark.anyio
    async def test_submit_creates_comparison(self, gateway) -> None:
        wizard = gdp_amount_wizard(gateway, settings=SETTINGS)
        self._fill_previous(wizard)
        wizard.update(current_year="2024", current_quarter="Q1", current_amount="4200.5")

        record = await wizard.submit()

        assert record.last_year.year == 2023
        assert record.current_year.year == 2024
        assert record.current_year.money == 4200.5
        assert record.trends == []
        assert wizard.current_step == 1


# ===================================================================
# Private / government and trade
# ===================================================================


class TestPrivateGovernmentWizard:
    @pytest.mark.anyio
    async def test_updates_bound_record(self, gateway, share_payload) -> None:
        share = await gateway.create(RecordKind.SECTOR_SHARE, share_payload)
        wizard = private_government_wizard(gateway, share.record_id, settings=SETTINGS)

        wizard.update(private_sector=60, government_sector=40)
        assert wizard.next().advanced
        wizard.update(imports=35.5, exports=20)
        record = await wizard.submit()

        assert record.record_id == share.record_id
        assert (record.private_sector, record.government_sector) == (60, 40)
        assert (record.imports, record.exports) == (35.5, 20)
        assert record.services_share == 46
        assert record.services_sub_shares == {"Trade": 19, "ICT": 5}

    @pytest.mark.anyio
    async def test_no_sum_requirement(self, gateway) -> None:
        wizard = private_government_wizard(gateway, uuid7(), settings=SETTINGS)
        wizard.update(private_sector=70, government_sector=70)
        assert wizard.next().advanced

    @pytest.mark.anyio
    async def test_bounds(self, gateway) -> None:
        wizard = private_government_wizard(gateway, uuid7(), settings=SETTINGS)
        wizard.update(private_sector=101, government_sector=None)
        kinds = [v.kind for v in wizard.next().violations]
        assert kinds == [ViolationKind.OUT_OF_RANGE, ViolationKind.MISSING_FIELD]

    @pytest.mark.anyio
    async def test_missing_record_keeps_input(self, gateway) -> None:
        wizard = private_government_wizard(gateway, uuid7(), settings=SETTINGS)
        wizard.update(private_sector=60, government_sector=40, imports=30, exports=20)
        wizard.next()

        with pytest.raises(RecordNotFoundError):
            await wizard.submit()

        assert wizard.current_step == 2
        assert wizard.data.imports == 30


# ===================================================================
# Growth by sector (one sector at a time)
# ===================================================================


class TestSectorGrowthWizard:
    @pytest.mark.anyio
    async def test_main_percentage_bounds(self, gateway) -> None:
        wizard = sector_growth_wizard(gateway, uuid7(), Sector.INDUSTRY, settings=SETTINGS)
        wizard.update(share="120")
        [violation] = wizard.next().violations
        assert (violation.kind, violation.field) == (ViolationKind.OUT_OF_RANGE, "industry_share")
        assert wizard.current_step == 1

    @pytest.mark.anyio
    async def test_sub_category_rules(self, gateway) -> None:
        wizard = sector_growth_wizard(gateway, uuid7(), Sector.AGRICULTURE, settings=SETTINGS)
        wizard.update(share=23)
        assert wizard.next().advanced

        wizard.update(sub_shares={"Food Crops": 14, "Banking": 3})
        [violation] = wizard.validate()
        assert violation.keys == ("Banking",)

        wizard.update(sub_shares={"Food Crops": 140})
        [violation] = wizard.validate()
        assert (violation.kind, violation.field) == (
            ViolationKind.OUT_OF_RANGE,
            "agriculture_sub_shares.Food Crops",
        )

    @pytest.mark.anyio
    async def test_services_detail_required(self, gateway) -> None:
        wizard = sector_growth_wizard(gateway, uuid7(), Sector.SERVICES, settings=SETTINGS)
        wizard.update(share=46)
        wizard.next()
        with pytest.raises(RecordValidationError) as exc_info:
            await wizard.submit()
        assert exc_info.value.kinds == {ViolationKind.MISSING_FIELD}

    @pytest.mark.anyio
    async def test_submit_updates_one_sector(self, gateway, share_payload) -> None:
        growth = await gateway.create(RecordKind.SECTOR_GROWTH, share_payload)
        wizard = sector_growth_wizard(gateway, growth.record_id, Sector.INDUSTRY, settings=SETTINGS)
        wizard.update(share="24")
        wizard.next()
        wizard.update(sub_shares={"Mining": "8", "Energy": 5})

        record = await wizard.submit()

        assert record.industry_share == 24
        assert record.industry_sub_shares == {"Mining": 8, "Energy": 5}
        assert record.services_sub_shares == {"Trade": 19, "ICT": 5}
        assert wizard.data == SectorGrowthForm()

    @pytest.mark.anyio
    async def test_share_breaking_total_keeps_input(self, gateway, share_payload) -> None:
        growth = await gateway.create(RecordKind.SECTOR_GROWTH, share_payload)
        wizard = sector_growth_wizard(gateway, growth.record_id, Sector.SERVICES, settings=SETTINGS)
        wizard.update(share=50)
        wizard.next()
        wizard.update(sub_shares={"Trade": 20})

        with pytest.raises(RecordValidationError) as exc_info:
            await wizard.submit()

        assert exc_info.value.kinds == {ViolationKind.SUM_MISMATCH}
        assert wizard.current_step == 2
        assert wizard.data.share == 50
        stored = await gateway.get(RecordKind.SECTOR_GROWTH, growth.record_id)
        assert stored.services_share == 46
