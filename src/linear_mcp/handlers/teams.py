import logging
from typing import Any, Dict

from mcp import types

from .base import BaseHandler

logger = logging.getLogger(__name__)


class TeamHandler(BaseHandler):
    """Handler for team-related operations."""

    entity = "team"

    async def handle_get_teams(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Lists teams with their workflow states and labels."""
        facade = self.verify_auth()

        data = await facade.get_teams()
        teams = self.nodes(data.get("teams"))

        if not teams:
            return self.create_response("No teams found", {"teams": []})

        blocks = []
        for team in teams:
            states = ", ".join(state.get("name", "") for state in self.nodes(team.get("states")))
            labels = ", ".join(label.get("name", "") for label in self.nodes(team.get("labels")))
            blocks.append(
                f"- {team.get('name')} ({team.get('key')})\n"
                f"  ID: {team.get('id')}\n"
                f"  States: {states or 'None'}\n"
                f"  Labels: {labels or 'None'}"
            )
        return self.create_response(
            f"Found {len(teams)} teams:\n" + "\n".join(blocks), {"teams": teams}
        )
