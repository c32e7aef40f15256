"""Shared test fixtures for the alarm desk test suite."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.models import Organization
from src.data.demo_store import DemoAlarmStore
from src.db.models import Base
from src.db.store import SqlAlarmStore
from tests.factories import BASE_TIME


# ── Async engine for tests (in-memory SQLite) ──────────────────


@pytest.fixture
async def async_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def sql_store(db_session) -> SqlAlarmStore:
    return SqlAlarmStore(db_session)


@pytest.fixture
def demo_store() -> DemoAlarmStore:
    return DemoAlarmStore("demo-org")


@pytest.fixture
def sample_organization() -> Organization:
    return Organization(
        id="org-1",
        name="Acme Platform",
        webhook_api_key="cw_testkey0000000000000000000",
        owner_id="user-1",
        created_at=BASE_TIME,
    )
