"""FastAPI dependency injection factories.

Each factory takes AsyncSession via Depends(get_async_session) and returns
the object the endpoints work through.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from econboard.db.session import get_async_session
from econboard.records.gateway import SqlRecordGateway


async def get_record_gateway(
    session: AsyncSession = Depends(get_async_session),
) -> SqlRecordGateway:
    return SqlRecordGateway(session)
