"""Pydantic domain models shared by the stores, the API and the core parser."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums ───────────────────────────────────────────────────────


class AlarmState(str, Enum):
    ALARM = "ALARM"
    OK = "OK"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class InvestigationStatus(str, Enum):
    PENDING = "PENDING"
    INVESTIGATING = "INVESTIGATING"
    RESOLVED = "RESOLVED"


# Written by older clients; counted and compared as PENDING.
LEGACY_ACKNOWLEDGED = "ACKNOWLEDGED"


def normalize_investigation_status(status: Any) -> str:
    """Map a stored investigation status onto its canonical value.

    Missing values and the legacy ``ACKNOWLEDGED`` status both become
    ``PENDING``. Unknown values are returned unchanged.
    """
    if isinstance(status, Enum):
        status = status.value
    if not status or status == LEGACY_ACKNOWLEDGED:
        return InvestigationStatus.PENDING.value
    return str(status)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_id() -> str:
    return uuid4().hex[:16]


def _as_utc(value: datetime) -> datetime:
    # SQLite stores no offset; every instant is kept in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Domain records ──────────────────────────────────────────────


class Organization(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(default_factory=new_id)
    name: str
    webhook_api_key: str
    owner_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    ensure_utc = field_validator("created_at")(_as_utc)


class OrganizationMember(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(default_factory=new_id)
    organization_id: str
    user_id: str
    user_email: Optional[str] = None
    role: str = "member"
    joined_at: datetime = Field(default_factory=utcnow)

    ensure_utc = field_validator("joined_at")(_as_utc)


class Alarm(BaseModel):
    """A CloudWatch alarm notification as stored for one organization."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(default_factory=new_id)
    organization_id: str
    alarm_name: str
    alarm_description: Optional[str] = None
    state: AlarmState
    state_reason: str = ""
    timestamp: datetime
    region: Optional[str] = None
    account_id: Optional[str] = None
    namespace: Optional[str] = None
    metric_name: Optional[str] = None
    investigation_status: Optional[str] = InvestigationStatus.PENDING.value
    raw_payload: Optional[dict[str, Any]] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    ensure_utc = field_validator("timestamp", "created_at", "updated_at")(_as_utc)

    @property
    def is_active(self) -> bool:
        return self.state == AlarmState.ALARM


class Investigation(BaseModel):
    """A user's notes and status for one alarm."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(default_factory=new_id)
    alarm_id: str
    user_id: str
    user_email: Optional[str] = None
    status: str
    notes: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    ensure_utc = field_validator("timestamp", "created_at", "updated_at")(_as_utc)
