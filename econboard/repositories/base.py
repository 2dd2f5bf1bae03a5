"""Generic row repositories over the record tables.

Repositories call add()/flush()/delete() only, never commit(); the
unit of work in ``econboard.db.session`` owns the transaction. Ids are
UUID v7 and timestamps UTC, both assigned here on insert.
"""

from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from econboard.models.common import new_uuid7, utc_now

R = TypeVar("R")


class RowRepository(Generic[R]):
    """CRUD over one table. Subclasses set ``row_cls`` and ``order_by``."""

    row_cls: ClassVar[type]
    order_by: ClassVar[tuple[Any, ...]] = ()

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, record_id: UUID) -> R | None:
        return await self._session.get(self.row_cls, record_id)

    async def create(self, values: dict) -> R:
        now = utc_now()
        row = self.row_cls(record_id=new_uuid7(), created_at=now, updated_at=now, **values)
        self._session.add(row)
        await self._session.flush()
        return row

    async def update(self, row: R, values: dict) -> R:
        for name, value in values.items():
            setattr(row, name, value)
        row.updated_at = utc_now()
        await self._session.flush()
        return row

    async def delete(self, row: R) -> None:
        await self._session.delete(row)
        await self._session.flush()

    async def list_all(self) -> list[R]:
        result = await self._session.execute(select(self.row_cls).order_by(*self.order_by))
        return list(result.scalars().all())


class ActiveRowRepository(RowRepository[R], Generic[R]):
    """Repository for tables carrying an ``is_active`` flag."""

    async def find_active(self) -> R | None:
        result = await self._session.execute(
            select(self.row_cls).where(self.row_cls.is_active.is_(True))
        )
        return result.scalars().first()

    async def lock_active(self) -> list[UUID]:
        """Row-lock the currently active rows (FOR UPDATE where supported)."""
        result = await self._session.execute(
            select(self.row_cls.record_id)
            .where(self.row_cls.is_active.is_(True))
            .with_for_update()
        )
        return list(result.scalars().all())
