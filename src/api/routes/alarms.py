"""Alarm browsing, resource grouping and investigation endpoints."""

from __future__ import annotations

from collections import Counter
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.dependencies import get_store
from src.api.schemas import (
    AlarmInvestigationResponse,
    AlarmListResponse,
    ErrorResponse,
    GroupedAlarmsResponse,
    ResourceSummary,
    ResourceTypeSummary,
    SaveInvestigationRequest,
    SaveInvestigationResponse,
)
from src.core.investigations import (
    AlarmNotFound,
    InvalidInvestigationStatus,
    get_alarm_investigation,
    save_investigation,
)
from src.core.models import Alarm
from src.core.resource_parser import (
    GroupedAlarms,
    ResourceGroup,
    count_alarms_by_status,
    group_alarms_by_resource,
)
from src.db.store import AlarmStore

router = APIRouter()


def _resource_summary(group: ResourceGroup, investigation_counts: Counter) -> ResourceSummary:
    return ResourceSummary(
        resource_info=group.resource_info,
        alarm_count=group.alarm_count,
        active_alarm_count=group.active_alarm_count,
        investigation_count=sum(investigation_counts[a.id] for a in group.alarms),
        investigation_statuses=list(group.investigation_statuses),
        status_counts=count_alarms_by_status(group.alarms),
        latest_alarm=group.latest_alarm,
        alarms=list(group.alarms),
    )


def _type_summary(grouped: GroupedAlarms, investigation_counts: Counter) -> ResourceTypeSummary:
    all_alarms = [a for r in grouped.resources for a in r.alarms]
    return ResourceTypeSummary(
        resource_type=grouped.resource_type,
        alarm_count=grouped.total_alarm_count,
        active_alarm_count=sum(r.active_alarm_count for r in grouped.resources),
        status_counts=count_alarms_by_status(all_alarms),
        resources=[_resource_summary(r, investigation_counts) for r in grouped.resources],
    )


async def _get_alarm_or_404(store: AlarmStore, alarm_id: str) -> Alarm:
    alarm = await store.get_alarm(alarm_id)
    if alarm is None:
        raise HTTPException(status_code=404, detail="Alarm not found")
    return alarm


@router.get("/alarms", response_model=AlarmListResponse)
async def list_all_alarms(
    organization_id: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    investigation_status: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: AlarmStore = Depends(get_store),
) -> AlarmListResponse:
    filters = dict(
        organization_id=organization_id,
        state=state,
        investigation_status=investigation_status,
    )
    alarms = await store.list_alarms(**filters, limit=limit, offset=offset)
    total = await store.count_alarms(**filters)
    return AlarmListResponse(alarms=alarms, total=total, limit=limit, offset=offset)


@router.get("/alarms/grouped", response_model=GroupedAlarmsResponse)
async def get_grouped_alarms(
    organization_id: Optional[str] = Query(default=None),
    store: AlarmStore = Depends(get_store),
) -> GroupedAlarmsResponse:
    """Alarms grouped by resource type and resource, largest groups first."""
    alarms = await store.list_alarms(organization_id=organization_id)
    investigations = await store.list_investigations(alarm_ids=[a.id for a in alarms])
    investigation_counts = Counter(i.alarm_id for i in investigations)

    grouped = group_alarms_by_resource(alarms)
    return GroupedAlarmsResponse(
        organization_id=organization_id,
        total_alarms=len(alarms),
        resource_types=[_type_summary(g, investigation_counts) for g in grouped],
    )


@router.get(
    "/alarms/{alarm_id}",
    response_model=Alarm,
    responses={404: {"model": ErrorResponse}},
)
async def get_alarm_detail(
    alarm_id: str,
    store: AlarmStore = Depends(get_store),
) -> Alarm:
    return await _get_alarm_or_404(store, alarm_id)


@router.get(
    "/alarms/{alarm_id}/investigation",
    response_model=AlarmInvestigationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_investigation_for_alarm(
    alarm_id: str,
    store: AlarmStore = Depends(get_store),
) -> AlarmInvestigationResponse:
    await _get_alarm_or_404(store, alarm_id)
    investigation = await get_alarm_investigation(store, alarm_id)
    return AlarmInvestigationResponse(alarm_id=alarm_id, investigation=investigation)


@router.put(
    "/alarms/{alarm_id}/investigation",
    response_model=SaveInvestigationResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def save_investigation_for_alarm(
    alarm_id: str,
    request: SaveInvestigationRequest,
    store: AlarmStore = Depends(get_store),
) -> SaveInvestigationResponse:
    try:
        alarm, investigation = await save_investigation(
            store,
            alarm_id,
            status=request.status,
            notes=request.notes,
            user_id=request.user_id,
            user_email=request.user_email,
        )
    except InvalidInvestigationStatus as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AlarmNotFound:
        raise HTTPException(status_code=404, detail="Alarm not found")
    return SaveInvestigationResponse(alarm=alarm, investigation=investigation)
