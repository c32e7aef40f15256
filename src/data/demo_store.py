"""In-memory AlarmStore used in demo mode.

Holds one seeded organization with its alarms and investigations. Data
lives for the life of the process; ``reset()`` restores the seed.
"""

from __future__ import annotations

from typing import Iterable, Optional, TypeVar

from pydantic import BaseModel

from src.core.logging import get_logger
from src.core.models import (
    Alarm,
    Investigation,
    Organization,
    OrganizationMember,
    normalize_investigation_status,
    utcnow,
)
from src.data.demo_data import (
    DEMO_USER_EMAIL,
    DEMO_USER_ID,
    demo_alarms,
    demo_investigations,
    demo_organization,
)
from src.db.store import AlarmStore

logger = get_logger("demo_store")

M = TypeVar("M", bound=BaseModel)


def _updated(model: M, changes: dict) -> M:
    data = model.model_dump()
    data.update({k: v for k, v in changes.items() if k in type(model).model_fields})
    if "updated_at" in data:
        data["updated_at"] = utcnow()
    return type(model).model_validate(data)


class DemoAlarmStore(AlarmStore):
    backend = "demo"

    def __init__(self, organization_id: str = "demo-org") -> None:
        self.organization_id = organization_id
        self._organizations: dict[str, Organization] = {}
        self._members: dict[str, OrganizationMember] = {}
        self._alarms: dict[str, Alarm] = {}
        self._investigations: dict[str, Investigation] = {}
        self.reset()

    def reset(self) -> None:
        """Discard every change and reload the seed data."""
        now = utcnow()
        organization = demo_organization(self.organization_id, now)
        self._organizations = {organization.id: organization}
        owner = OrganizationMember(
            organization_id=organization.id,
            user_id=DEMO_USER_ID,
            user_email=DEMO_USER_EMAIL,
            role="owner",
            joined_at=now,
        )
        self._members = {owner.id: owner}
        self._alarms = {a.id: a for a in demo_alarms(self.organization_id, now)}
        self._investigations = {i.id: i for i in demo_investigations(now)}
        logger.info(
            "demo_data_loaded",
            alarms=len(self._alarms),
            investigations=len(self._investigations),
        )

    # ── Organizations ───────────────────────────────────────────

    async def create_organization(self, organization: Organization) -> Organization:
        self._organizations[organization.id] = organization
        return organization

    async def get_organization(self, organization_id: str) -> Organization | None:
        return self._organizations.get(organization_id)

    async def get_organization_by_api_key(self, api_key: str) -> Organization | None:
        for organization in self._organizations.values():
            if organization.webhook_api_key == api_key:
                return organization
        return None

    async def list_organizations(self, *, owner_id: Optional[str] = None) -> list[Organization]:
        return [
            o for o in self._organizations.values()
            if owner_id is None or o.owner_id == owner_id
        ]

    async def update_organization(self, organization_id: str, **changes) -> Organization | None:
        organization = self._organizations.get(organization_id)
        if organization is None:
            return None
        updated = _updated(organization, changes)
        self._organizations[organization_id] = updated
        return updated

    async def add_member(self, member: OrganizationMember) -> OrganizationMember:
        self._members[member.id] = member
        return member

    async def list_members(self, organization_id: str) -> list[OrganizationMember]:
        members = [m for m in self._members.values() if m.organization_id == organization_id]
        return sorted(members, key=lambda m: m.joined_at)

    # ── Alarms ──────────────────────────────────────────────────

    def _matching_alarms(self, organization_id, state, investigation_status) -> list[Alarm]:
        wanted_status = (
            normalize_investigation_status(investigation_status) if investigation_status else None
        )
        matches = []
        for alarm in self._alarms.values():
            if organization_id and alarm.organization_id != organization_id:
                continue
            if state and alarm.state.value != state:
                continue
            if wanted_status and normalize_investigation_status(alarm.investigation_status) != wanted_status:
                continue
            matches.append(alarm)
        return matches

    async def create_alarm(self, alarm: Alarm) -> Alarm:
        self._alarms[alarm.id] = alarm
        return alarm

    async def get_alarm(self, alarm_id: str) -> Alarm | None:
        return self._alarms.get(alarm_id)

    async def list_alarms(
        self,
        *,
        organization_id: Optional[str] = None,
        state: Optional[str] = None,
        investigation_status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Alarm]:
        alarms = sorted(
            self._matching_alarms(organization_id, state, investigation_status),
            key=lambda a: a.timestamp,
            reverse=True,
        )
        end = None if limit is None else offset + limit
        return alarms[offset:end]

    async def count_alarms(
        self,
        *,
        organization_id: Optional[str] = None,
        state: Optional[str] = None,
        investigation_status: Optional[str] = None,
    ) -> int:
        return len(self._matching_alarms(organization_id, state, investigation_status))

    async def update_alarm(self, alarm_id: str, **changes) -> Alarm | None:
        alarm = self._alarms.get(alarm_id)
        if alarm is None:
            return None
        updated = _updated(alarm, changes)
        self._alarms[alarm_id] = updated
        return updated

    # ── Investigations ──────────────────────────────────────────

    async def create_investigation(self, investigation: Investigation) -> Investigation:
        self._investigations[investigation.id] = investigation
        return investigation

    async def get_investigation(self, investigation_id: str) -> Investigation | None:
        return self._investigations.get(investigation_id)

    async def list_investigations(
        self,
        *,
        alarm_id: Optional[str] = None,
        alarm_ids: Optional[Iterable[str]] = None,
    ) -> list[Investigation]:
        wanted = set(alarm_ids) if alarm_ids is not None else None
        investigations = [
            i for i in self._investigations.values()
            if (alarm_id is None or i.alarm_id == alarm_id)
            and (wanted is None or i.alarm_id in wanted)
        ]
        return sorted(investigations, key=lambda i: i.timestamp, reverse=True)

    async def update_investigation(self, investigation_id: str, **changes) -> Investigation | None:
        investigation = self._investigations.get(investigation_id)
        if investigation is None:
            return None
        updated = _updated(investigation, changes)
        self._investigations[investigation_id] = updated
        return updated


# Module-level singleton
_demo_store: DemoAlarmStore | None = None


def get_demo_store(organization_id: str = "demo-org") -> DemoAlarmStore:
    global _demo_store
    if _demo_store is None:
        _demo_store = DemoAlarmStore(organization_id)
    return _demo_store
