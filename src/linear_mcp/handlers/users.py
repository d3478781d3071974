import logging
from typing import Any, Dict

from mcp import types

from .base import BaseHandler

logger = logging.getLogger(__name__)


class UserHandler(BaseHandler):
    """Handler for the authenticated user."""

    entity = "user"

    async def handle_get_user(self, args: Dict[str, Any]) -> types.CallToolResult:
        facade = self.verify_auth()

        data = await facade.get_current_user()
        viewer = self.require_entity(data, "viewer", "get user")

        teams = ", ".join(
            f"{team.get('name')} ({team.get('key')})" for team in self.nodes(viewer.get("teams"))
        )
        text = (
            f"User: {viewer.get('name')}\n"
            f"Email: {viewer.get('email')}\n"
            f"ID: {viewer.get('id')}\n"
            f"Teams: {teams or 'None'}"
        )
        return self.create_response(text, {"user": viewer})
