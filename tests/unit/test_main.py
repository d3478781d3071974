"""Tests for the stdio entry point."""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from linear_mcp import main
from linear_mcp.config import Settings
from linear_mcp.observability import metrics


@asynccontextmanager
async def _fake_stdio():
    yield MagicMock(), MagicMock()


def _settings(**env):
    with patch.dict(os.environ, {"ENVIRONMENT": "test", **env}, clear=True):
        return Settings()


class TestServe:
    """Tests for serve() startup and shutdown."""

    @pytest.fixture(autouse=True)
    def _wiring(self):
        server = MagicMock()
        server.server.run = AsyncMock()
        with patch.object(main, "stdio_server", _fake_stdio), \
                patch.object(main, "LinearMCPServer", return_value=server), \
                patch.object(main, "configure_logging"), \
                patch.object(main, "get_http_client"), \
                patch.object(main, "close_http_client", new_callable=AsyncMock) as close:
            self.server = server
            self.close = close
            yield
        metrics.configure_metrics(False)

    async def test_metrics_server_started_when_enabled(self):
        settings = _settings(LINEAR_MCP_ENABLE_METRICS="true", LINEAR_MCP_METRICS_PORT="9100")

        with patch.object(main, "get_settings", return_value=settings), \
                patch.object(main, "start_metrics_server") as start:
            await main.serve()

        start.assert_called_once_with(9100, "127.0.0.1")
        self.server.server.run.assert_awaited_once()
        self.close.assert_awaited_once()

    async def test_metrics_server_not_started_when_disabled(self):
        with patch.object(main, "get_settings", return_value=_settings()), \
                patch.object(main, "start_metrics_server") as start:
            await main.serve()

        start.assert_not_called()
        self.close.assert_awaited_once()

    async def test_client_closed_when_server_fails(self):
        self.server.server.run.side_effect = RuntimeError("stream closed")

        with patch.object(main, "get_settings", return_value=_settings()), \
                patch.object(main, "start_metrics_server"):
            with pytest.raises(RuntimeError):
                await main.serve()

        self.close.assert_awaited_once()
