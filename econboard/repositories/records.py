"""Row repositories, one per record kind."""

from econboard.db.tables import (
    PeriodAmountRow,
    PeriodComparisonRow,
    SectorGrowthRow,
    SectorShareRow,
    SectorSnapshotRow,
    TargetRow,
)
from econboard.repositories.base import ActiveRowRepository, RowRepository


class SectorShareRepository(RowRepository[SectorShareRow]):
    row_cls = SectorShareRow
    order_by = (SectorShareRow.created_at, SectorShareRow.record_id)


class SectorGrowthRepository(RowRepository[SectorGrowthRow]):
    row_cls = SectorGrowthRow
    order_by = (SectorGrowthRow.created_at, SectorGrowthRow.record_id)


class SectorSnapshotRepository(ActiveRowRepository[SectorSnapshotRow]):
    row_cls = SectorSnapshotRow
    order_by = (SectorSnapshotRow.year.desc(), SectorSnapshotRow.created_at.desc())


class PeriodAmountRepository(ActiveRowRepository[PeriodAmountRow]):
    row_cls = PeriodAmountRow
    order_by = (PeriodAmountRow.year.desc(), PeriodAmountRow.quarter.desc())


class PeriodComparisonRepository(RowRepository[PeriodComparisonRow]):
    row_cls = PeriodComparisonRow
    order_by = (PeriodComparisonRow.created_at.desc(), PeriodComparisonRow.record_id.desc())


class TargetRepository(RowRepository[TargetRow]):
    row_cls = TargetRow
    order_by = (TargetRow.created_at, TargetRow.record_id)
