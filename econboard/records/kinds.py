"""Registry tying each record kind to its payload, table, repository and rules."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from econboard.errors import Violation
from econboard.models.common import RecordKind
from econboard.models.records import (
    PeriodAmountData,
    PeriodAmountRecord,
    PeriodComparisonData,
    PeriodComparisonRecord,
    SectorGrowthData,
    SectorGrowthRecord,
    SectorShareData,
    SectorShareRecord,
    SectorSnapshotData,
    SectorSnapshotRecord,
    TargetData,
    TargetRecord,
)
from econboard.repositories.base import ActiveRowRepository, RowRepository
from econboard.repositories.records import (
    PeriodAmountRepository,
    PeriodComparisonRepository,
    SectorGrowthRepository,
    SectorShareRepository,
    SectorSnapshotRepository,
    TargetRepository,
)
from econboard.validation.rules import AUXILIARY_FIELDS, PARTITION_FIELDS, SNAPSHOT_PARTITION_FIELDS
from econboard.validation.shares import (
    validate_period_amount,
    validate_period_comparison,
    validate_sector_snapshot,
    validate_share_record,
    validate_target,
)


@dataclass(frozen=True)
class KindSpec:
    """Everything the gateway needs to store one kind of record."""

    kind: RecordKind
    label: str
    resource: str
    data_cls: type[BaseModel]
    record_cls: type[BaseModel]
    repository_cls: type[RowRepository]
    validate: Callable[[Any], list[Violation]]
    # Percentage-of-total_gdp fields with a derived amount view.
    amount_fields: tuple[str, ...] = ()

    @property
    def has_active(self) -> bool:
        return issubclass(self.repository_cls, ActiveRowRepository)


KIND_SPECS: dict[RecordKind, KindSpec] = {
    RecordKind.SECTOR_SHARE: KindSpec(
        kind=RecordKind.SECTOR_SHARE,
        label="GDP share",
        resource="gdp-shares",
        data_cls=SectorShareData,
        record_cls=SectorShareRecord,
        repository_cls=SectorShareRepository,
        validate=validate_share_record,
        amount_fields=PARTITION_FIELDS + AUXILIARY_FIELDS,
    ),
    RecordKind.PERIOD_AMOUNT: KindSpec(
        kind=RecordKind.PERIOD_AMOUNT,
        label="GDP record",
        resource="gdp-records",
        data_cls=PeriodAmountData,
        record_cls=PeriodAmountRecord,
        repository_cls=PeriodAmountRepository,
        validate=validate_period_amount,
    ),
    RecordKind.TARGET: KindSpec(
        kind=RecordKind.TARGET,
        label="No Poverty target",
        resource="no-poverty-targets",
        data_cls=TargetData,
        record_cls=TargetRecord,
        repository_cls=TargetRepository,
        validate=validate_target,
    ),
    RecordKind.SECTOR_SNAPSHOT: KindSpec(
        kind=RecordKind.SECTOR_SNAPSHOT,
        label="GDP share by sector",
        resource="gdp-share-by-sector",
        data_cls=SectorSnapshotData,
        record_cls=SectorSnapshotRecord,
        repository_cls=SectorSnapshotRepository,
        validate=validate_sector_snapshot,
        amount_fields=SNAPSHOT_PARTITION_FIELDS,
    ),
    RecordKind.PERIOD_COMPARISON: KindSpec(
        kind=RecordKind.PERIOD_COMPARISON,
        label="GDP current price",
        resource="gdp-current-price",
        data_cls=PeriodComparisonData,
        record_cls=PeriodComparisonRecord,
        repository_cls=PeriodComparisonRepository,
        validate=validate_period_comparison,
    ),
    RecordKind.SECTOR_GROWTH: KindSpec(
        kind=RecordKind.SECTOR_GROWTH,
        label="GDP growth by sector",
        resource="gdp-growth-by-sector",
        data_cls=SectorGrowthData,
        record_cls=SectorGrowthRecord,
        repository_cls=SectorGrowthRepository,
        validate=validate_share_record,
    ),
}


def spec_for(kind: RecordKind | str) -> KindSpec:
    return KIND_SPECS[RecordKind(kind)]
