"""Record resources — one router per record kind.

POST   /v1/{resource}              — create (201)
GET    /v1/{resource}              — list
GET    /v1/{resource}/active       — current active record (active kinds only)
GET    /v1/{resource}/{record_id}  — fetch one
GET    /v1/{resource}/{record_id}/amounts — share amounts (share kinds only)
PATCH  /v1/{resource}/{record_id}  — partial update
DELETE /v1/{resource}/{record_id}  — delete (204)

Bodies are taken as raw JSON objects so that the gateway, not the
framework, reports MISSING_FIELD / MALFORMED and the share rules.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response
from pydantic.alias_generators import to_camel

from econboard.api.dependencies import get_record_gateway
from econboard.models.common import RecordKind
from econboard.records.gateway import SqlRecordGateway
from econboard.records.kinds import KIND_SPECS, spec_for
from econboard.validation.shares import share_amounts


def _out(record: Any) -> dict:
    return record.model_dump(mode="json", by_alias=True)


def build_router(kind: RecordKind) -> APIRouter:
    spec = spec_for(kind)
    router = APIRouter(prefix=f"/v1/{spec.resource}", tags=[spec.resource])

    @router.post("", status_code=201)
    async def create_record(
        body: dict[str, Any] = Body(...),
        gateway: SqlRecordGateway = Depends(get_record_gateway),
    ) -> dict:
        return _out(await gateway.create(kind, body))

    @router.get("")
    async def list_records(
        gateway: SqlRecordGateway = Depends(get_record_gateway),
    ) -> list[dict]:
        return [_out(r) for r in await gateway.find_all(kind)]

    if spec.has_active:

        @router.get("/active")
        async def get_active_record(
            gateway: SqlRecordGateway = Depends(get_record_gateway),
        ) -> dict | None:
            record = await gateway.find_active(kind)
            return _out(record) if record is not None else None

    @router.get("/{record_id}")
    async def get_record(
        record_id: UUID,
        gateway: SqlRecordGateway = Depends(get_record_gateway),
    ) -> dict:
        return _out(await gateway.get(kind, record_id))

    if spec.amount_fields:

        @router.get("/{record_id}/amounts")
        async def get_share_amounts(
            record_id: UUID,
            gateway: SqlRecordGateway = Depends(get_record_gateway),
        ) -> dict:
            """Amount of total GDP behind each share of the record."""
            record = await gateway.get(kind, record_id)
            amounts = share_amounts(record, spec.amount_fields)
            return {
                "id": str(record.record_id),
                "totalGdp": record.total_gdp,
                "amounts": {to_camel(name): value for name, value in amounts.items()},
            }

    @router.patch("/{record_id}")
    async def update_record(
        record_id: UUID,
        body: dict[str, Any] = Body(...),
        gateway: SqlRecordGateway = Depends(get_record_gateway),
    ) -> dict:
        return _out(await gateway.update(kind, record_id, body))

    @router.delete("/{record_id}", status_code=204)
    async def delete_record(
        record_id: UUID,
        gateway: SqlRecordGateway = Depends(get_record_gateway),
    ) -> Response:
        await gateway.remove(kind, record_id)
        return Response(status_code=204)

    return router


routers: list[APIRouter] = [build_router(kind) for kind in KIND_SPECS]
