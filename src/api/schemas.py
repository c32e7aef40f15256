"""Request/response schemas for the API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.core.models import Alarm, Investigation, InvestigationStatus
from src.core.resource_parser import ResourceInfo


# ── Request Schemas ──────────────────────────────────────────────


class CreateOrganizationRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200, examples=["Acme Platform Team"])
    owner_id: str = Field(min_length=1, description="Id of the user creating the organization")
    owner_email: Optional[str] = None


class InviteMemberRequest(BaseModel):
    user_email: str = Field(min_length=3, examples=["oncall@example.com"])


class SaveInvestigationRequest(BaseModel):
    status: str = Field(
        default=InvestigationStatus.PENDING.value,
        examples=["PENDING", "INVESTIGATING", "RESOLVED"],
    )
    notes: Optional[str] = None
    user_id: str = Field(min_length=1)
    user_email: Optional[str] = None


# ── Response Schemas ─────────────────────────────────────────────


class OrganizationResponse(BaseModel):
    id: str
    name: str
    owner_id: Optional[str] = None
    webhook_api_key: str
    webhook_url: str
    created_at: Optional[datetime] = None


class MemberResponse(BaseModel):
    id: str
    organization_id: str
    user_id: str
    user_email: Optional[str] = None
    role: str
    joined_at: Optional[datetime] = None


class MemberListResponse(BaseModel):
    members: list[MemberResponse]
    total: int


class AlarmListResponse(BaseModel):
    alarms: list[Alarm]
    total: int
    limit: int
    offset: int


class AlarmInvestigationResponse(BaseModel):
    alarm_id: str
    investigation: Optional[Investigation] = None


class SaveInvestigationResponse(BaseModel):
    alarm: Alarm
    investigation: Investigation


class ResourceSummary(BaseModel):
    resource_info: ResourceInfo
    alarm_count: int
    active_alarm_count: int
    investigation_count: int = 0
    investigation_statuses: list[str] = Field(default_factory=list)
    status_counts: dict[str, int] = Field(default_factory=dict)
    latest_alarm: Optional[Alarm] = None
    alarms: list[Alarm] = Field(default_factory=list)


class ResourceTypeSummary(BaseModel):
    resource_type: str
    alarm_count: int
    active_alarm_count: int
    status_counts: dict[str, int] = Field(default_factory=dict)
    resources: list[ResourceSummary]


class GroupedAlarmsResponse(BaseModel):
    organization_id: Optional[str] = None
    total_alarms: int
    resource_types: list[ResourceTypeSummary]


class WebhookResponse(BaseModel):
    message: str
    alarm_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    storage_backend: str


class ErrorResponse(BaseModel):
    detail: str
