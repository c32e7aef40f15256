"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_app_settings
from src.api.schemas import HealthResponse
from src.core.config import Settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    return HealthResponse(status="ok", storage_backend=settings.storage_backend)
