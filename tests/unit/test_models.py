"""Unit tests for src/core/models.py."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.core.models import (
    Alarm,
    AlarmState,
    InvestigationStatus,
    normalize_investigation_status,
)
from tests.factories import BASE_TIME, make_alarm


class TestEnums:
    def test_alarm_state_values(self):
        assert {s.value for s in AlarmState} == {"ALARM", "OK", "INSUFFICIENT_DATA"}

    def test_investigation_status_values(self):
        assert [s.value for s in InvestigationStatus] == ["PENDING", "INVESTIGATING", "RESOLVED"]

    def test_state_compares_to_string(self):
        assert AlarmState.ALARM == "ALARM"


class TestNormalizeInvestigationStatus:
    @pytest.mark.parametrize("status", [None, "", "ACKNOWLEDGED", "PENDING"])
    def test_pending_equivalents(self, status):
        assert normalize_investigation_status(status) == "PENDING"

    def test_known_statuses_pass_through(self):
        assert normalize_investigation_status("INVESTIGATING") == "INVESTIGATING"
        assert normalize_investigation_status("RESOLVED") == "RESOLVED"

    def test_enum_member_unwrapped(self):
        assert normalize_investigation_status(InvestigationStatus.RESOLVED) == "RESOLVED"

    def test_unknown_status_returned_unchanged(self):
        assert normalize_investigation_status("ESCALATED") == "ESCALATED"


class TestAlarm:
    def test_state_coerced_from_string(self):
        alarm = make_alarm(state="OK")
        assert alarm.state is AlarmState.OK
        assert alarm.is_active is False

    def test_is_active_only_for_alarm_state(self):
        assert make_alarm(state=AlarmState.ALARM).is_active is True
        assert make_alarm(state=AlarmState.INSUFFICIENT_DATA).is_active is False

    def test_invalid_state_rejected(self):
        with pytest.raises(ValidationError):
            make_alarm(state="BROKEN")

    def test_naive_timestamp_treated_as_utc(self):
        alarm = make_alarm(timestamp=datetime(2025, 1, 15, 10, 30))
        assert alarm.timestamp.tzinfo is not None
        assert alarm.timestamp == BASE_TIME

    def test_offset_timestamp_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        alarm = make_alarm(timestamp=datetime(2025, 1, 15, 12, 30, tzinfo=plus_two))
        assert alarm.timestamp.utcoffset() == timedelta(0)
        assert alarm.timestamp == BASE_TIME
        assert alarm.timestamp.hour == 10

    def test_ids_are_generated(self):
        assert make_alarm().id != make_alarm().id

    def test_alarm_is_immutable(self):
        alarm = make_alarm()
        with pytest.raises(ValidationError):
            alarm.alarm_name = "renamed"

    def test_defaults(self):
        alarm = Alarm(
            organization_id="org-1",
            alarm_name="Bare",
            state=AlarmState.ALARM,
            timestamp=BASE_TIME,
        )
        assert alarm.investigation_status == "PENDING"
        assert alarm.state_reason == ""
        assert alarm.namespace is None
        assert alarm.raw_payload is None

