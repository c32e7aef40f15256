"""Unit tests for src/core/logging.py."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from src.core.logging import _resolve_level, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_structlog():
    yield
    structlog.reset_defaults()


class TestResolveLevel:
    def test_names(self):
        assert _resolve_level("debug") == logging.DEBUG
        assert _resolve_level("WARNING") == logging.WARNING

    def test_int_passthrough(self):
        assert _resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_name_defaults_to_info(self):
        assert _resolve_level("chatty") == logging.INFO


class TestConfigureLogging:
    def test_json_output_binds_component(self, capsys):
        configure_logging(json_output=True, level="INFO")
        get_logger("webhook").info("alarm_ingested", alarm_id="a-1")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "alarm_ingested"
        assert event["component"] == "webhook"
        assert event["alarm_id"] == "a-1"
        assert event["level"] == "info"

    def test_level_filters_lower_events(self, capsys):
        configure_logging(json_output=True, level="WARNING")
        get_logger("webhook").info("hidden_event")
        assert "hidden_event" not in capsys.readouterr().err
