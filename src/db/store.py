"""Storage interface shared by the database and demo backends.

Callers only see pydantic domain models; which backend serves them is
chosen by ``CWA_STORAGE_BACKEND``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.models import Alarm, Investigation, Organization, OrganizationMember
from src.db import repository


class AlarmStore(ABC):
    """List-by-filter, get-by-id, create and update for every record kind."""

    backend: str = ""

    # ── Organizations ───────────────────────────────────────────

    @abstractmethod
    async def create_organization(self, organization: Organization) -> Organization: ...

    @abstractmethod
    async def get_organization(self, organization_id: str) -> Organization | None: ...

    @abstractmethod
    async def get_organization_by_api_key(self, api_key: str) -> Organization | None: ...

    @abstractmethod
    async def list_organizations(self, *, owner_id: Optional[str] = None) -> list[Organization]: ...

    @abstractmethod
    async def update_organization(self, organization_id: str, **changes) -> Organization | None: ...

    @abstractmethod
    async def add_member(self, member: OrganizationMember) -> OrganizationMember: ...

    @abstractmethod
    async def list_members(self, organization_id: str) -> list[OrganizationMember]: ...

    # ── Alarms ──────────────────────────────────────────────────

    @abstractmethod
    async def create_alarm(self, alarm: Alarm) -> Alarm: ...

    @abstractmethod
    async def get_alarm(self, alarm_id: str) -> Alarm | None: ...

    @abstractmethod
    async def list_alarms(
        self,
        *,
        organization_id: Optional[str] = None,
        state: Optional[str] = None,
        investigation_status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Alarm]:
        """Alarms matching every given filter, newest first."""

    @abstractmethod
    async def count_alarms(
        self,
        *,
        organization_id: Optional[str] = None,
        state: Optional[str] = None,
        investigation_status: Optional[str] = None,
    ) -> int: ...

    @abstractmethod
    async def update_alarm(self, alarm_id: str, **changes) -> Alarm | None: ...

    # ── Investigations ──────────────────────────────────────────

    @abstractmethod
    async def create_investigation(self, investigation: Investigation) -> Investigation: ...

    @abstractmethod
    async def get_investigation(self, investigation_id: str) -> Investigation | None: ...

    @abstractmethod
    async def list_investigations(
        self,
        *,
        alarm_id: Optional[str] = None,
        alarm_ids: Optional[Iterable[str]] = None,
    ) -> list[Investigation]:
        """Investigations for the given alarm(s), newest first."""

    @abstractmethod
    async def update_investigation(self, investigation_id: str, **changes) -> Investigation | None: ...


def _to_model(model_cls, record):
    if record is None:
        return None
    return model_cls.model_validate(record)


class SqlAlarmStore(AlarmStore):
    """AlarmStore backed by the SQLAlchemy repository functions."""

    backend = "database"

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_organization(self, organization: Organization) -> Organization:
        record = await repository.create_organization(self._session, organization)
        return Organization.model_validate(record)

    async def get_organization(self, organization_id: str) -> Organization | None:
        record = await repository.get_organization(self._session, organization_id)
        return _to_model(Organization, record)

    async def get_organization_by_api_key(self, api_key: str) -> Organization | None:
        record = await repository.get_organization_by_api_key(self._session, api_key)
        return _to_model(Organization, record)

    async def list_organizations(self, *, owner_id: Optional[str] = None) -> list[Organization]:
        records = await repository.list_organizations(self._session, owner_id=owner_id)
        return [Organization.model_validate(r) for r in records]

    async def update_organization(self, organization_id: str, **changes) -> Organization | None:
        record = await repository.update_organization(self._session, organization_id, **changes)
        return _to_model(Organization, record)

    async def add_member(self, member: OrganizationMember) -> OrganizationMember:
        record = await repository.add_member(self._session, member)
        return OrganizationMember.model_validate(record)

    async def list_members(self, organization_id: str) -> list[OrganizationMember]:
        records = await repository.list_members(self._session, organization_id)
        return [OrganizationMember.model_validate(r) for r in records]

    async def create_alarm(self, alarm: Alarm) -> Alarm:
        record = await repository.create_alarm(self._session, alarm)
        return Alarm.model_validate(record)

    async def get_alarm(self, alarm_id: str) -> Alarm | None:
        record = await repository.get_alarm(self._session, alarm_id)
        return _to_model(Alarm, record)

    async def list_alarms(
        self,
        *,
        organization_id: Optional[str] = None,
        state: Optional[str] = None,
        investigation_status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Alarm]:
        records = await repository.list_alarms(
            self._session,
            organization_id=organization_id,
            state=state,
            investigation_status=investigation_status,
            limit=limit,
            offset=offset,
        )
        return [Alarm.model_validate(r) for r in records]

    async def count_alarms(
        self,
        *,
        organization_id: Optional[str] = None,
        state: Optional[str] = None,
        investigation_status: Optional[str] = None,
    ) -> int:
        return await repository.count_alarms(
            self._session,
            organization_id=organization_id,
            state=state,
            investigation_status=investigation_status,
        )

    async def update_alarm(self, alarm_id: str, **changes) -> Alarm | None:
        record = await repository.update_alarm(self._session, alarm_id, **changes)
        return _to_model(Alarm, record)

    async def create_investigation(self, investigation: Investigation) -> Investigation:
        record = await repository.create_investigation(self._session, investigation)
        return Investigation.model_validate(record)

    async def get_investigation(self, investigation_id: str) -> Investigation | None:
        record = await repository.get_investigation(self._session, investigation_id)
        return _to_model(Investigation, record)

    async def list_investigations(
        self,
        *,
        alarm_id: Optional[str] = None,
        alarm_ids: Optional[Iterable[str]] = None,
    ) -> list[Investigation]:
        records = await repository.list_investigations(
            self._session, alarm_id=alarm_id, alarm_ids=alarm_ids
        )
        return [Investigation.model_validate(r) for r in records]

    async def update_investigation(self, investigation_id: str, **changes) -> Investigation | None:
        record = await repository.update_investigation(self._session, investigation_id, **changes)
        return _to_model(Investigation, record)
