"""Prometheus-compatible metrics endpoint.

Exposes alarm counts in Prometheus text format for scraping.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from src.api.dependencies import get_store
from src.core.models import AlarmState, InvestigationStatus
from src.db.store import AlarmStore

router = APIRouter()

_start_time = time.time()


@router.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics(
    store: AlarmStore = Depends(get_store),
) -> PlainTextResponse:
    """Expose application metrics in Prometheus text format."""

    total = await store.count_alarms()
    active = await store.count_alarms(state=AlarmState.ALARM.value)
    uptime = time.time() - _start_time

    lines = [
        "# HELP cwa_alarms_total Total number of stored alarms",
        "# TYPE cwa_alarms_total gauge",
        f"cwa_alarms_total {total}",
        "",
        "# HELP cwa_alarms_active Alarms whose latest state is ALARM",
        "# TYPE cwa_alarms_active gauge",
        f"cwa_alarms_active {active}",
        "",
        "# HELP cwa_alarms_by_investigation_status Alarms per investigation status",
        "# TYPE cwa_alarms_by_investigation_status gauge",
    ]
    for status in InvestigationStatus:
        count = await store.count_alarms(investigation_status=status.value)
        lines.append(f'cwa_alarms_by_investigation_status{{status="{status.value}"}} {count}')

    lines += [
        "",
        "# HELP cwa_uptime_seconds API server uptime in seconds",
        "# TYPE cwa_uptime_seconds gauge",
        f"cwa_uptime_seconds {uptime:.1f}",
        "",
    ]

    return PlainTextResponse(
        content="\n".join(lines),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
