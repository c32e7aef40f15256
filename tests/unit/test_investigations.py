"""Unit tests for src/core/investigations.py using the demo store."""

from __future__ import annotations

import pytest

from src.core.investigations import (
    AlarmNotFound,
    InvalidInvestigationStatus,
    get_alarm_investigation,
    save_investigation,
    validate_status,
)


class TestValidateStatus:
    @pytest.mark.parametrize("status", ["PENDING", "INVESTIGATING", "RESOLVED"])
    def test_workflow_statuses(self, status):
        assert validate_status(status) == status

    def test_acknowledged_becomes_pending(self):
        assert validate_status("ACKNOWLEDGED") == "PENDING"

    @pytest.mark.parametrize("status", ["", "resolved", "CLOSED"])
    def test_rejects_other_values(self, status):
        with pytest.raises(InvalidInvestigationStatus):
            validate_status(status)


class TestGetAlarmInvestigation:
    @pytest.mark.asyncio
    async def test_existing(self, demo_store):
        investigation = await get_alarm_investigation(demo_store, "demo-2")
        assert investigation.id == "inv-1"
        assert investigation.status == "INVESTIGATING"

    @pytest.mark.asyncio
    async def test_none_recorded(self, demo_store):
        assert await get_alarm_investigation(demo_store, "demo-1") is None


class TestSaveInvestigation:
    @pytest.mark.asyncio
    async def test_creates_first_investigation(self, demo_store):
        alarm, investigation = await save_investigation(
            demo_store,
            "demo-1",
            status="INVESTIGATING",
            notes="Looking at the API hosts",
            user_id="user-7",
            user_email="oncall@example.com",
        )
        assert investigation.alarm_id == "demo-1"
        assert investigation.user_id == "user-7"
        assert investigation.notes == "Looking at the API hosts"
        assert alarm.investigation_status == "INVESTIGATING"
        assert len(await demo_store.list_investigations(alarm_id="demo-1")) == 1

    @pytest.mark.asyncio
    async def test_updates_existing_investigation(self, demo_store):
        alarm, investigation = await save_investigation(
            demo_store, "demo-2", status="RESOLVED", notes="Rotated logs", user_id="user-7",
        )
        assert investigation.id == "inv-1"
        assert investigation.status == "RESOLVED"
        assert investigation.notes == "Rotated logs"
        # the original author is kept on update
        assert investigation.user_id == "demo-user"
        assert alarm.investigation_status == "RESOLVED"
        assert len(await demo_store.list_investigations(alarm_id="demo-2")) == 1

    @pytest.mark.asyncio
    async def test_acknowledged_saved_as_pending(self, demo_store):
        alarm, investigation = await save_investigation(
            demo_store, "demo-3", status="ACKNOWLEDGED", notes=None, user_id="user-7",
        )
        assert investigation.status == "PENDING"
        assert alarm.investigation_status == "PENDING"

    @pytest.mark.asyncio
    async def test_invalid_status_changes_nothing(self, demo_store):
        with pytest.raises(InvalidInvestigationStatus):
            await save_investigation(demo_store, "demo-1", status="DONE", notes=None, user_id="u")
        assert (await demo_store.get_alarm("demo-1")).investigation_status == "PENDING"
        assert await get_alarm_investigation(demo_store, "demo-1") is None

    @pytest.mark.asyncio
    async def test_missing_alarm(self, demo_store):
        with pytest.raises(AlarmNotFound):
            await save_investigation(demo_store, "nope", status="RESOLVED", notes=None, user_id="u")
