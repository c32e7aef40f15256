"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.config import get_settings
from src.core.logging import configure_logging, get_logger
from src.db.engine import create_tables, dispose_engine

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables on startup, dispose engine on shutdown."""
    configure_logging()
    settings = get_settings()
    logger.info("api_starting", storage_backend=settings.storage_backend)

    if settings.storage_backend == "database":
        await create_tables()
        logger.info("database_ready")

    yield

    await dispose_engine()
    logger.info("api_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CloudWatch Alarm Desk",
        description="Collects CloudWatch alarms per organization and groups them by resource",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register routes
    from src.api.routes import alarms, demo, health, metrics, organizations, webhook

    app.include_router(health.router, tags=["health"])
    app.include_router(metrics.router, tags=["metrics"])
    app.include_router(webhook.router, tags=["webhook"])
    app.include_router(organizations.router, prefix="/api/v1", tags=["organizations"])
    app.include_router(alarms.router, prefix="/api/v1", tags=["alarms"])
    app.include_router(demo.router, prefix="/api/v1", tags=["demo"])

    return app
