"""Tests for structured logging configuration."""

import json

import pytest
import structlog

from docextract.observability.context import correlation_id_context
from docextract.observability.logging import (
    add_correlation_id_processor,
    configure_logging,
    get_logger,
)


def _last_record(capsys) -> dict:
    return json.loads(capsys.readouterr().err.strip().splitlines()[-1])


class TestAddCorrelationIdProcessor:
    """Tests for add_correlation_id_processor."""

    def test_adds_correlation_id_when_set(self):
        with correlation_id_context("run-1"):
            result = add_correlation_id_processor(None, "info", {"event": "x"})

        assert result["correlation_id"] == "run-1"

    def test_adds_none_marker_when_not_set(self):
        result = add_correlation_id_processor(None, "info", {"event": "x"})

        assert result["correlation_id"] == "none"

    def test_preserves_existing_fields(self):
        result = add_correlation_id_processor(
            None, "info", {"event": "x", "count": 42}
        )

        assert result["count"] == 42


class TestConfigureLogging:
    """Tests for configure_logging output."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_json_output_includes_correlation_id(self, capsys):
        configure_logging(level="INFO", json_output=True)

        with correlation_id_context("run-42"):
            get_logger("batch_driver").info("unit_succeeded", file_path="a.pdf")

        record = _last_record(capsys)
        assert record["event"] == "unit_succeeded"
        assert record["correlation_id"] == "run-42"
        assert record["component"] == "batch_driver"
        assert record["file_path"] == "a.pdf"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_output=True)

        logger = get_logger("request_queue")
        logger.info("hidden_event")
        logger.warning("shown_event")

        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err

    def test_without_timestamp(self, capsys):
        configure_logging(level="INFO", json_output=True, add_timestamp=False)

        get_logger().info("no_ts")

        assert "timestamp" not in _last_record(capsys)


class TestGetLogger:
    """Tests for get_logger."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_binds_initial_context_without_component(self, capsys):
        configure_logging(level="INFO", json_output=True)

        get_logger(run_id="abc").info("bound")

        record = _last_record(capsys)
        assert record["run_id"] == "abc"
        assert "component" not in record

    def test_component_and_context_together(self, capsys):
        configure_logging(level="INFO", json_output=True)

        get_logger("ledger", run_id="abc").info("ledger_entry_written")

        record = _last_record(capsys)
        assert record["component"] == "ledger"
        assert record["run_id"] == "abc"

    def test_module_level_logger_follows_later_configuration(self, capsys):
        logger = get_logger("retry")

        configure_logging(level="INFO", json_output=True)
        logger.info("configured_after_creation")

        record = _last_record(capsys)
        assert record["event"] == "configured_after_creation"
        assert record["component"] == "retry"
