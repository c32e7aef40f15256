"""Demo mode controls."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_store
from src.api.schemas import ErrorResponse
from src.data.demo_store import DemoAlarmStore
from src.db.store import AlarmStore

router = APIRouter()


@router.post("/demo/reset", responses={409: {"model": ErrorResponse}})
async def reset_demo_data(store: AlarmStore = Depends(get_store)) -> dict:
    if not isinstance(store, DemoAlarmStore):
        raise HTTPException(status_code=409, detail="Demo reset requires the demo storage backend")
    store.reset()
    return {"message": "Demo data reset", "alarms": await store.count_alarms()}
