"""Single-active invariant for record kinds with an ``is_active`` flag.

set_active runs inside a SAVEPOINT of the caller's unit of work:

1. lock the currently active rows (FOR UPDATE on Postgres)
2. if the new value is active, demote every other row of the kind
3. insert or update the target row (is_active defaults to False)

A partial unique index on each active table rejects a second active row
from a concurrent transaction, so the invariant holds across processes.
Any storage failure rolls back the savepoint; no partial demotion is
visible.
"""

import logging
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from econboard.errors import RecordNotFoundError, StorageError
from econboard.models.common import RecordKind
from econboard.records.kinds import spec_for
from econboard.repositories.base import ActiveRowRepository

logger = logging.getLogger(__name__)


class ActiveRecordManager:
    """Writes for active-singleton kinds."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _repository(self, kind: RecordKind) -> ActiveRowRepository:
        spec = spec_for(kind)
        if not spec.has_active:
            msg = f"{kind} records have no active flag."
            raise ValueError(msg)
        return spec.repository_cls(self._session)

    async def set_active(self, kind: RecordKind, values: dict, record_id: UUID | None = None):
        """Insert (``record_id`` is None) or update a row, keeping at most one active.

        Raises:
            RecordNotFoundError: ``record_id`` does not exist.
            StorageError: the transaction failed (conflict, constraint, I/O).
        """
        repo = self._repository(kind)
        row_cls = repo.row_cls
        values = {**values, "is_active": bool(values.get("is_active", False))}

        try:
            async with self._session.begin_nested():
                row = None
                if record_id is not None:
                    row = await repo.get(record_id)
                    if row is None:
                        raise RecordNotFoundError(kind, record_id)

                if values["is_active"]:
                    await repo.lock_active()
                    stmt = update(row_cls).where(row_cls.is_active.is_(True))
                    if record_id is not None:
                        stmt = stmt.where(row_cls.record_id != record_id)
                    result = await self._session.execute(stmt.values(is_active=False))
                    if result.rowcount:
                        logger.info("Demoted %d active %s record(s)", result.rowcount, kind)

                if row is None:
                    row = await repo.create(values)
                else:
                    row = await repo.update(row, values)
        except SQLAlchemyError as exc:
            logger.exception("set_active failed for %s", kind)
            msg = f"Failed to save {kind} record."
            raise StorageError(msg) from exc

        return row
