"""Integration tests for src/db/repository.py and SqlAlarmStore using in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.core.models import AlarmState, Investigation, OrganizationMember
from src.core.resource_parser import group_alarms_by_resource
from src.db.models import AlarmRecord, OrganizationRecord
from src.db.repository import (
    count_alarms,
    create_alarm,
    create_organization,
    get_alarm,
    get_organization_by_api_key,
    list_alarms,
    list_organizations,
    update_alarm,
)
from tests.factories import make_alarm


@pytest.fixture
async def organization(db_session, sample_organization):
    await create_organization(db_session, sample_organization)
    return sample_organization


# ── Repository functions ────────────────────────────────────────


class TestOrganizationRepository:
    @pytest.mark.asyncio
    async def test_create_returns_record(self, db_session, sample_organization):
        record = await create_organization(db_session, sample_organization)
        assert isinstance(record, OrganizationRecord)
        assert record.id == "org-1"
        assert record.webhook_api_key == sample_organization.webhook_api_key

    @pytest.mark.asyncio
    async def test_lookup_by_api_key(self, db_session, organization):
        record = await get_organization_by_api_key(db_session, organization.webhook_api_key)
        assert record.id == organization.id
        assert await get_organization_by_api_key(db_session, "cw_unknown") is None

    @pytest.mark.asyncio
    async def test_list_by_owner(self, db_session, organization):
        assert [r.id for r in await list_organizations(db_session, owner_id="user-1")] == ["org-1"]
        assert await list_organizations(db_session, owner_id="user-2") == []


class TestAlarmRepository:
    @pytest.mark.asyncio
    async def test_create_stores_state_value(self, db_session, organization):
        record = await create_alarm(db_session, make_alarm(state=AlarmState.OK))
        assert isinstance(record, AlarmRecord)
        assert record.state == "OK"

    @pytest.mark.asyncio
    async def test_get_nonexistent(self, db_session):
        assert await get_alarm(db_session, "does-not-exist") is None

    @pytest.mark.asyncio
    async def test_list_ordered_newest_first(self, db_session, organization):
        for minutes in (30, 5, 60):
            await create_alarm(db_session, make_alarm(f"Alarm {minutes}", minutes_ago=minutes))
        records = await list_alarms(db_session)
        assert [r.alarm_name for r in records] == ["Alarm 5", "Alarm 30", "Alarm 60"]

    @pytest.mark.asyncio
    async def test_list_pagination(self, db_session, organization):
        for minutes in range(5):
            await create_alarm(db_session, make_alarm(f"Alarm {minutes}", minutes_ago=minutes))
        page = await list_alarms(db_session, limit=2, offset=1)
        assert [r.alarm_name for r in page] == ["Alarm 1", "Alarm 2"]

    @pytest.mark.asyncio
    async def test_filter_by_state(self, db_session, organization):
        await create_alarm(db_session, make_alarm(state=AlarmState.ALARM))
        await create_alarm(db_session, make_alarm(state=AlarmState.OK))
        assert await count_alarms(db_session, state="ALARM") == 1
        assert await count_alarms(db_session) == 2

    @pytest.mark.asyncio
    async def test_pending_filter_includes_legacy_values(self, db_session, organization):
        for status in ("PENDING", "ACKNOWLEDGED", None, "RESOLVED"):
            await create_alarm(db_session, make_alarm(investigation_status=status))
        assert await count_alarms(db_session, investigation_status="PENDING") == 3
        assert await count_alarms(db_session, investigation_status="ACKNOWLEDGED") == 3
        assert await count_alarms(db_session, investigation_status="RESOLVED") == 1

    @pytest.mark.asyncio
    async def test_filter_by_organization(self, db_session, organization):
        await create_alarm(db_session, make_alarm(organization_id="org-1"))
        await create_alarm(db_session, make_alarm(organization_id="org-2"))
        records = await list_alarms(db_session, organization_id="org-2")
        assert [r.organization_id for r in records] == ["org-2"]

    @pytest.mark.asyncio
    async def test_update(self, db_session, organization):
        alarm = make_alarm()
        await create_alarm(db_session, alarm)
        record = await update_alarm(db_session, alarm.id, investigation_status="INVESTIGATING")
        assert record.investigation_status == "INVESTIGATING"

    @pytest.mark.asyncio
    async def test_update_nonexistent(self, db_session):
        assert await update_alarm(db_session, "nope", investigation_status="RESOLVED") is None


# ── SqlAlarmStore ───────────────────────────────────────────────


class TestSqlAlarmStore:
    @pytest.mark.asyncio
    async def test_backend_name(self, sql_store):
        assert sql_store.backend == "database"

    @pytest.mark.asyncio
    async def test_alarm_round_trip_is_utc(self, sql_store, sample_organization):
        await sql_store.create_organization(sample_organization)
        created = await sql_store.create_alarm(
            make_alarm(metric_name="CPUUtilization", raw_payload={"AlarmName": "cpu"})
        )
        fetched = await sql_store.get_alarm(created.id)

        assert fetched.state is AlarmState.ALARM
        assert fetched.timestamp == created.timestamp
        assert fetched.timestamp.tzinfo is not None
        assert fetched.raw_payload == {"AlarmName": "cpu"}

    @pytest.mark.asyncio
    async def test_offset_timestamp_keeps_instant(self, sql_store, sample_organization):
        await sql_store.create_organization(sample_organization)
        plus_two = timezone(timedelta(hours=2))
        older = await sql_store.create_alarm(
            make_alarm("CPU - web", timestamp=datetime(2025, 1, 15, 12, 0, tzinfo=plus_two))
        )
        newer = await sql_store.create_alarm(
            make_alarm("Memory - web", timestamp=datetime(2025, 1, 15, 11, 0, tzinfo=timezone.utc))
        )

        fetched = await sql_store.get_alarm(older.id)
        assert fetched.timestamp == datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)

        alarms = await sql_store.list_alarms()
        assert [a.id for a in alarms] == [newer.id, older.id]
        [group] = group_alarms_by_resource(alarms)
        assert [a.id for a in group.resources[0].alarms] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, sql_store):
        assert await sql_store.get_alarm("missing") is None
        assert await sql_store.get_organization("missing") is None
        assert await sql_store.update_investigation("missing", status="RESOLVED") is None

    @pytest.mark.asyncio
    async def test_members(self, sql_store, sample_organization):
        await sql_store.create_organization(sample_organization)
        await sql_store.add_member(
            OrganizationMember(organization_id="org-1", user_id="user-1", role="owner")
        )
        members = await sql_store.list_members("org-1")
        assert [(m.user_id, m.role) for m in members] == [("user-1", "owner")]

    @pytest.mark.asyncio
    async def test_update_organization_key(self, sql_store, sample_organization):
        await sql_store.create_organization(sample_organization)
        updated = await sql_store.update_organization("org-1", webhook_api_key="cw_rotated")
        assert updated.webhook_api_key == "cw_rotated"
        assert (await sql_store.get_organization_by_api_key("cw_rotated")).id == "org-1"

    @pytest.mark.asyncio
    async def test_investigations_newest_first(self, sql_store, sample_organization):
        await sql_store.create_organization(sample_organization)
        first = await sql_store.create_alarm(make_alarm("First"))
        second = await sql_store.create_alarm(make_alarm("Second"))
        await sql_store.create_investigation(
            Investigation(alarm_id=first.id, user_id="u", status="PENDING",
                          timestamp=make_alarm(minutes_ago=10).timestamp)
        )
        await sql_store.create_investigation(
            Investigation(alarm_id=first.id, user_id="u", status="RESOLVED",
                          timestamp=make_alarm().timestamp)
        )
        await sql_store.create_investigation(
            Investigation(alarm_id=second.id, user_id="u", status="INVESTIGATING")
        )

        for_first = await sql_store.list_investigations(alarm_id=first.id)
        assert [i.status for i in for_first] == ["RESOLVED", "PENDING"]

        both = await sql_store.list_investigations(alarm_ids=[first.id, second.id])
        assert len(both) == 3
        assert await sql_store.list_investigations(alarm_ids=[]) == []

    @pytest.mark.asyncio
    async def test_save_investigation_workflow(self, sql_store, sample_organization):
        from src.core.investigations import get_alarm_investigation, save_investigation

        await sql_store.create_organization(sample_organization)
        alarm = await sql_store.create_alarm(make_alarm())

        await save_investigation(sql_store, alarm.id, status="INVESTIGATING", notes="a", user_id="u")
        updated_alarm, investigation = await save_investigation(
            sql_store, alarm.id, status="RESOLVED", notes="b", user_id="u",
        )

        assert updated_alarm.investigation_status == "RESOLVED"
        assert investigation.status == "RESOLVED"
        assert (await get_alarm_investigation(sql_store, alarm.id)).notes == "b"
        assert len(await sql_store.list_investigations(alarm_id=alarm.id)) == 1
