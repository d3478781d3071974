"""MCP server exposing the Linear tools."""

import logging
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server

from .session import LinearSession
from .tools import build_tool_catalog

logger = logging.getLogger(__name__)


class LinearMCPServer:
    """Binds a ``LinearSession`` to an ``mcp.server.Server``."""

    def __init__(self, session: LinearSession, name: str = "linear-mcp"):
        self.session = session
        self.tools: List[types.Tool] = build_tool_catalog()
        self.server = Server(name)
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            logger.debug("Returning %d tools", len(self.tools))
            return self.tools

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: Optional[Dict[str, Any]] = None
        ) -> types.CallToolResult:
            return await self.session.call_tool(name, arguments or {})
