"""Shared pytest fixtures for the econboard test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- gateway: SqlRecordGateway bound to db_session
- client: AsyncClient with dependency overrides for DB-backed testing
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from econboard.db.session import Base, get_async_session
from econboard.records.gateway import SqlRecordGateway
import econboard.db.tables  # noqa: F401  register ORM models on Base.metadata


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed; it rolls back at teardown.
    Application code calling session.commit() triggers a SAVEPOINT release,
    which is then restarted so subsequent operations stay in the same
    outer transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
def gateway(db_session) -> SqlRecordGateway:
    return SqlRecordGateway(db_session)


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from econboard.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def share_payload() -> dict:
    """A valid SECTOR_SHARE payload (46 + 24 + 23 + 7 = 100)."""
    return {
        "totalGdp": 5255,
        "servicesShare": 46,
        "industryShare": 24,
        "agricultureShare": 23,
        "taxesShare": 7,
        "servicesSubShares": {"Trade": 19, "ICT": 5},
        "agricultureSubShares": {"Food Crops": 14},
        "industrySubShares": None,
    }
