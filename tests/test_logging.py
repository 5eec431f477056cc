"""
Tests for the logging module.

Tests verify:
- Context binding is merged into records and removed again
- JSON output uses ECS field names
- Records below the configured level are dropped
"""

import json
import logging

import pytest
import structlog

from relkeep.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


def _events(caplog: pytest.LogCaptureFixture) -> list[dict]:
    return [json.loads(r.getMessage()) for r in caplog.records if r.getMessage().startswith("{")]


class TestContextManagement:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_bind_and_unbind(self):
        bind_context(request_id="abc")
        assert structlog.contextvars.get_contextvars() == {"request_id": "abc"}
        unbind_context("request_id")
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scoped(self):
        with LogContext(operation="delete_entity", entity_id=4):
            assert structlog.contextvars.get_contextvars()["entity_id"] == 4
        assert "entity_id" not in structlog.contextvars.get_contextvars()


class TestConfigureLogging:
    def teardown_method(self):
        clear_context()
        structlog.reset_defaults()

    def test_json_output_uses_ecs_fields(self, caplog):
        caplog.set_level(logging.DEBUG)
        configure_logging(level="INFO", json_format=True, service="relkeep-test")
        logger = get_logger("relkeep.test")

        with LogContext(request_id="r-1"):
            logger.info("entity_created", entity_id=1)

        record = next(r for r in _events(caplog) if r["event"] == "entity_created")
        assert record["service.name"] == "relkeep-test"
        assert record["log.level"] == "info"
        assert record["logger"] == "relkeep.test"
        assert record["request_id"] == "r-1"
        assert record["entity_id"] == 1
        assert "@timestamp" in record

    def test_level_filtering(self, caplog):
        caplog.set_level(logging.DEBUG)
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("relkeep.test.filter")

        logger.info("quiet_event")
        logger.warning("loud_event")

        events = [r["event"] for r in _events(caplog)]
        assert "loud_event" in events
        assert "quiet_event" not in events
