"""Tests for logging configuration and metrics recording."""

import json
import logging
import sys
from unittest.mock import patch

import prometheus_client
import pytest

from linear_mcp.observability import metrics
from linear_mcp.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    clear_log_context,
    configure_logging,
    set_log_context,
)


def _record(msg="hello"):
    return logging.LogRecord("linear_mcp.test", logging.INFO, __file__, 1, msg, (), None)


class TestLogging:
    """Tests for the log formatters and configure_logging()."""

    def teardown_method(self):
        clear_log_context()

    def test_structured_formatter_includes_context(self):
        set_log_context(tool_name="linear_get_teams", request_id="r1")

        entry = json.loads(StructuredFormatter().format(_record()))

        assert entry["message"] == "hello"
        assert entry["tool_name"] == "linear_get_teams"
        assert entry["request_id"] == "r1"

    def test_human_formatter_without_context(self):
        line = HumanReadableFormatter().format(_record())

        assert "linear_mcp.test: hello" in line
        assert "[tool=" not in line

    def test_human_formatter_with_context(self):
        set_log_context(tool_name="linear_get_user")

        assert "[tool=linear_get_user]" in HumanReadableFormatter().format(_record())

    def test_configure_logging_writes_to_stderr(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(environment="production", log_level="debug")

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert root.handlers[0].stream is sys.stderr
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestMetrics:
    """Tests for metric recording."""

    @pytest.fixture(autouse=True)
    def _restore(self):
        yield
        metrics.configure_metrics(False)

    def test_disabled_is_noop(self):
        metrics.configure_metrics(False)

        metrics.record_tool_call("linear_get_teams", "success", 0.1)

        assert metrics.tool_calls_total() is None
        assert metrics.token_refresh_total() is None

    def test_enabled_records(self):
        metrics.configure_metrics(True)

        metrics.record_tool_call("linear_get_teams", "success", 0.1)
        metrics.record_token_refresh("success")

        text = prometheus_client.generate_latest().decode("utf-8")
        assert "linear_mcp_tool_calls_total{" in text
        assert 'tool_name="linear_get_teams"' in text
        assert "linear_mcp_token_refresh_total" in text

    @patch("linear_mcp.observability.metrics.prometheus_client.start_http_server")
    def test_start_metrics_server(self, mock_start):
        metrics.start_metrics_server(9100, "0.0.0.0")

        mock_start.assert_called_once_with(9100, addr="0.0.0.0")
