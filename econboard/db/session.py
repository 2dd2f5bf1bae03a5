"""Async engine and Unit-of-Work sessions for econboard.

Repositories and ActiveRecordManager only add/flush and open SAVEPOINTs.
``unit_of_work`` is the one place that commits: on a clean exit of the
block, or never (rollback) when anything raises.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from econboard.config.settings import Settings, get_settings


class Base(DeclarativeBase):
    """Declarative base for the record tables."""


def build_engine(settings: Settings) -> AsyncEngine:
    """Async engine for ``settings.DATABASE_URL``.

    SQLite (tests, local tinkering) gets no pre-ping; its connections never
    go stale.
    """
    options: dict = {"echo": settings.DATABASE_ECHO}
    if not settings.DATABASE_URL.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return create_async_engine(settings.DATABASE_URL, **options)


engine = build_engine(get_settings())

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def unit_of_work(
    factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> AsyncIterator[AsyncSession]:
    """Session that commits when the block exits cleanly, rolls back otherwise."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one unit of work per request."""
    async with unit_of_work() as session:
        yield session
