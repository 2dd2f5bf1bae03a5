"""Record gateway, the contract between the wizards and storage.

Every create/update parses the payload into the kind's pydantic model and
re-runs the kind's validator before touching storage, whether or not the
caller already validated. Active-singleton kinds are written through
ActiveRecordManager.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Protocol
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from econboard.errors import (
    RecordNotFoundError,
    RecordValidationError,
    StorageError,
    Violation,
    ViolationKind,
)
from econboard.models.common import RecordKind
from econboard.records.active import ActiveRecordManager
from econboard.records.kinds import KindSpec, spec_for
from econboard.validation.shares import validate_append_only

logger = logging.getLogger(__name__)

# Target collections that may only grow at the end.
_APPEND_ONLY_FIELDS: dict[RecordKind, tuple[str, ...]] = {
    RecordKind.TARGET: ("trend", "map"),
}


class RecordGateway(Protocol):
    """Persistence contract used by the wizards and the HTTP layer."""

    async def create(self, kind: RecordKind, data: Mapping[str, Any] | BaseModel) -> BaseModel: ...

    async def get(self, kind: RecordKind, record_id: UUID) -> BaseModel: ...

    async def update(self, kind: RecordKind, record_id: UUID, partial: Mapping[str, Any]) -> BaseModel: ...

    async def remove(self, kind: RecordKind, record_id: UUID) -> None: ...

    async def find_active(self, kind: RecordKind) -> BaseModel | None: ...

    async def find_all(self, kind: RecordKind) -> list[BaseModel]: ...


def violations_from_pydantic(exc: PydanticValidationError) -> list[Violation]:
    """Translate payload parsing errors into MISSING_FIELD / MALFORMED violations."""
    violations = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "payload"
        kind = ViolationKind.MISSING_FIELD if err["type"] == "missing" else ViolationKind.MALFORMED
        violations.append(Violation(kind=kind, field=field, message=f"{field}: {err['msg']}"))
    return violations


class SqlRecordGateway:
    """RecordGateway backed by the SQLAlchemy async session (Unit-of-Work)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._active = ActiveRecordManager(session)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _storage_errors(self, action: str, spec: KindSpec) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s %s record", action, spec.kind)
            msg = f"Failed to {action} {spec.label} record."
            raise StorageError(msg) from exc

    @staticmethod
    def _parse(spec: KindSpec, payload: Mapping[str, Any] | BaseModel) -> BaseModel:
        if isinstance(payload, spec.data_cls):
            payload = payload.model_dump(by_alias=True)
        try:
            return spec.data_cls.model_validate(payload)
        except PydanticValidationError as exc:
            raise RecordValidationError(violations_from_pydantic(exc)) from exc

    @staticmethod
    def _check(spec: KindSpec, data: BaseModel, extra: list[Violation] | None = None) -> None:
        violations = [*spec.validate(data), *(extra or [])]
        if violations:
            logger.info(
                "Rejected %s payload: %s",
                spec.kind,
                ", ".join(f"{v.kind}:{v.field}" for v in violations),
            )
            raise RecordValidationError(violations)

    @staticmethod
    def _aliased(spec: KindSpec, partial: Mapping[str, Any]) -> dict[str, Any]:
        """Normalise snake_case keys of a partial payload to wire aliases."""
        fields = spec.data_cls.model_fields
        out = {}
        for key, value in partial.items():
            info = fields.get(key)
            out[(info.alias or key) if info is not None else key] = value
        return out

    @staticmethod
    def _to_record(spec: KindSpec, row: Any) -> BaseModel:
        values = {col.key: getattr(row, col.key) for col in row.__table__.columns}
        return spec.record_cls.model_validate(values)

    async def _get_row(self, spec: KindSpec, record_id: UUID) -> Any:
        repo = spec.repository_cls(self._session)
        with self._storage_errors("fetch", spec):
            row = await repo.get(record_id)
        if row is None:
            raise RecordNotFoundError(spec.kind, record_id)
        return row

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    async def create(self, kind: RecordKind, data: Mapping[str, Any] | BaseModel) -> BaseModel:
        spec = spec_for(kind)
        parsed = self._parse(spec, data)
        self._check(spec, parsed)
        values = parsed.model_dump(mode="json")

        if spec.has_active:
            row = await self._active.set_active(spec.kind, values)
        else:
            repo = spec.repository_cls(self._session)
            with self._storage_errors("create", spec):
                row = await repo.create(values)

        logger.info("Created %s record %s", spec.kind, row.record_id)
        return self._to_record(spec, row)

    async def get(self, kind: RecordKind, record_id: UUID) -> BaseModel:
        spec = spec_for(kind)
        return self._to_record(spec, await self._get_row(spec, record_id))

    async def update(self, kind: RecordKind, record_id: UUID, partial: Mapping[str, Any]) -> BaseModel:
        """Merge ``partial`` onto the stored record, validate the result, save.

        For active-singleton kinds an unset ``isActive`` means inactive.
        """
        spec = spec_for(kind)
        row = await self._get_row(spec, record_id)
        current = self._to_record(spec, row)

        changes = self._aliased(spec, partial)
        merged = current.model_dump(include=set(spec.data_cls.model_fields), by_alias=True)
        merged.update(changes)
        if spec.has_active and "isActive" not in changes:
            merged["isActive"] = False

        parsed = self._parse(spec, merged)
        extra: list[Violation] = []
        for name in _APPEND_ONLY_FIELDS.get(spec.kind, ()):
            violation = validate_append_only(getattr(current, name), getattr(parsed, name), field=name)
            if violation is not None:
                extra.append(violation)
        self._check(spec, parsed, extra)
        values = parsed.model_dump(mode="json")

        if spec.has_active:
            row = await self._active.set_active(spec.kind, values, record_id=record_id)
        else:
            repo = spec.repository_cls(self._session)
            with self._storage_errors("update", spec):
                row = await repo.update(row, values)

        logger.info("Updated %s record %s", spec.kind, record_id)
        return self._to_record(spec, row)

    async def remove(self, kind: RecordKind, record_id: UUID) -> None:
        spec = spec_for(kind)
        row = await self._get_row(spec, record_id)
        repo = spec.repository_cls(self._session)
        with self._storage_errors("delete", spec):
            await repo.delete(row)
        logger.info("Deleted %s record %s", spec.kind, record_id)

    async def find_active(self, kind: RecordKind) -> BaseModel | None:
        spec = spec_for(kind)
        if not spec.has_active:
            return None
        repo = spec.repository_cls(self._session)
        with self._storage_errors("fetch", spec):
            row = await repo.find_active()
        return self._to_record(spec, row) if row is not None else None

    async def find_all(self, kind: RecordKind) -> list[BaseModel]:
        spec = spec_for(kind)
        repo = spec.repository_cls(self._session)
        with self._storage_errors("fetch", spec):
            rows = await repo.list_all()
        return [self._to_record(spec, row) for row in rows]
