"""Data access layer for organizations, alarms and investigations."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.models import (
    LEGACY_ACKNOWLEDGED,
    Alarm,
    Investigation,
    InvestigationStatus,
    Organization,
    OrganizationMember,
    normalize_investigation_status,
    utcnow,
)
from src.db.models import (
    AlarmRecord,
    InvestigationRecord,
    OrganizationMemberRecord,
    OrganizationRecord,
)


async def _apply_updates(session: AsyncSession, record, changes: dict):
    for key, value in changes.items():
        if hasattr(record, key):
            setattr(record, key, value)
    if hasattr(record, "updated_at"):
        record.updated_at = utcnow()
    await session.commit()
    await session.refresh(record)
    return record


# ── Organizations ───────────────────────────────────────────────


async def create_organization(
    session: AsyncSession,
    organization: Organization,
) -> OrganizationRecord:
    record = OrganizationRecord(**organization.model_dump())
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def get_organization(
    session: AsyncSession,
    organization_id: str,
) -> OrganizationRecord | None:
    return await session.get(OrganizationRecord, organization_id)


async def get_organization_by_api_key(
    session: AsyncSession,
    api_key: str,
) -> OrganizationRecord | None:
    stmt = select(OrganizationRecord).where(OrganizationRecord.webhook_api_key == api_key)
    result = await session.execute(stmt)
    return result.scalars().first()


async def list_organizations(
    session: AsyncSession,
    *,
    owner_id: Optional[str] = None,
) -> list[OrganizationRecord]:
    stmt = select(OrganizationRecord).order_by(OrganizationRecord.created_at)
    if owner_id:
        stmt = stmt.where(OrganizationRecord.owner_id == owner_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_organization(
    session: AsyncSession,
    organization_id: str,
    **kwargs,
) -> OrganizationRecord | None:
    record = await session.get(OrganizationRecord, organization_id)
    if record is None:
        return None
    return await _apply_updates(session, record, kwargs)


async def add_member(
    session: AsyncSession,
    member: OrganizationMember,
) -> OrganizationMemberRecord:
    record = OrganizationMemberRecord(**member.model_dump())
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def list_members(
    session: AsyncSession,
    organization_id: str,
) -> list[OrganizationMemberRecord]:
    stmt = (
        select(OrganizationMemberRecord)
        .where(OrganizationMemberRecord.organization_id == organization_id)
        .order_by(OrganizationMemberRecord.joined_at)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


# ── Alarms ──────────────────────────────────────────────────────


def _status_filter(status: str):
    """WHERE clause matching a status, treating legacy/missing values as PENDING."""
    status = normalize_investigation_status(status)
    column = AlarmRecord.investigation_status
    if status == InvestigationStatus.PENDING.value:
        return or_(
            column.is_(None),
            column.in_([InvestigationStatus.PENDING.value, LEGACY_ACKNOWLEDGED, ""]),
        )
    return column == status


def _alarm_query(stmt, *, organization_id, state, investigation_status):
    if organization_id:
        stmt = stmt.where(AlarmRecord.organization_id == organization_id)
    if state:
        stmt = stmt.where(AlarmRecord.state == state)
    if investigation_status:
        stmt = stmt.where(_status_filter(investigation_status))
    return stmt


async def create_alarm(session: AsyncSession, alarm: Alarm) -> AlarmRecord:
    columns = alarm.model_dump()
    columns["state"] = alarm.state.value
    record = AlarmRecord(**columns)
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def get_alarm(session: AsyncSession, alarm_id: str) -> AlarmRecord | None:
    return await session.get(AlarmRecord, alarm_id)


async def list_alarms(
    session: AsyncSession,
    *,
    organization_id: Optional[str] = None,
    state: Optional[str] = None,
    investigation_status: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> list[AlarmRecord]:
    stmt = select(AlarmRecord).order_by(desc(AlarmRecord.timestamp))
    stmt = _alarm_query(
        stmt,
        organization_id=organization_id,
        state=state,
        investigation_status=investigation_status,
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_alarms(
    session: AsyncSession,
    *,
    organization_id: Optional[str] = None,
    state: Optional[str] = None,
    investigation_status: Optional[str] = None,
) -> int:
    stmt = select(func.count(AlarmRecord.id))
    stmt = _alarm_query(
        stmt,
        organization_id=organization_id,
        state=state,
        investigation_status=investigation_status,
    )
    result = await session.execute(stmt)
    return result.scalar_one()


async def update_alarm(
    session: AsyncSession,
    alarm_id: str,
    **kwargs,
) -> AlarmRecord | None:
    record = await session.get(AlarmRecord, alarm_id)
    if record is None:
        return None
    return await _apply_updates(session, record, kwargs)


# ── Investigations ──────────────────────────────────────────────


async def create_investigation(
    session: AsyncSession,
    investigation: Investigation,
) -> InvestigationRecord:
    record = InvestigationRecord(**investigation.model_dump())
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def get_investigation(
    session: AsyncSession,
    investigation_id: str,
) -> InvestigationRecord | None:
    return await session.get(InvestigationRecord, investigation_id)


async def list_investigations(
    session: AsyncSession,
    *,
    alarm_id: Optional[str] = None,
    alarm_ids: Optional[Iterable[str]] = None,
) -> list[InvestigationRecord]:
    stmt = select(InvestigationRecord).order_by(desc(InvestigationRecord.timestamp))
    if alarm_id:
        stmt = stmt.where(InvestigationRecord.alarm_id == alarm_id)
    if alarm_ids is not None:
        stmt = stmt.where(InvestigationRecord.alarm_id.in_(list(alarm_ids)))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_investigation(
    session: AsyncSession,
    investigation_id: str,
    **kwargs,
) -> InvestigationRecord | None:
    record = await session.get(InvestigationRecord, investigation_id)
    if record is None:
        return None
    return await _apply_updates(session, record, kwargs)
