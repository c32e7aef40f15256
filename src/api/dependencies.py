"""FastAPI dependency injection."""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends

from src.core.config import Settings, get_settings
from src.data.demo_store import get_demo_store
from src.db.engine import get_session_factory
from src.db.store import AlarmStore, SqlAlarmStore


def get_app_settings() -> Settings:
    return get_settings()


async def get_store(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[AlarmStore, None]:
    """The configured AlarmStore; a fresh DB session per request in database mode."""
    if settings.storage_backend == "demo":
        yield get_demo_store(settings.demo_organization_id)
        return
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield SqlAlarmStore(session)
