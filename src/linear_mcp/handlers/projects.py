"""Project tools: create a project together with its issues, get, search."""

import logging
from typing import Any, Dict

from mcp import types

from ..exceptions import InvalidParamsError
from .base import BaseHandler
from .issues import validate_issue_input

logger = logging.getLogger(__name__)

PROJECT_CREATE_FIELDS = ("name", "teamIds", "description")


class ProjectHandler(BaseHandler):
    """Handler for project-related operations."""

    entity = "project"

    async def handle_create_project_with_issues(
        self, args: Dict[str, Any]
    ) -> types.CallToolResult:
        """Creates a project, then its issues in one batch.

        Each issue's ``teamId`` must be one of the project's ``teamIds``. The
        two upstream calls are not atomic; see
        ``LinearQueryFacade.create_project_with_issues``.
        """
        facade = self.verify_auth()
        self.validate_required_params(args, ["project", "issues"])

        project = args["project"]
        if not isinstance(project, dict):
            raise InvalidParamsError("project must be an object", ["project"])
        try:
            self.validate_required_params(project, ["name", "teamIds"])
            team_ids = self.require_list(project, "teamIds")
        except InvalidParamsError as exc:
            raise InvalidParamsError(
                f"project: {exc.message}", [f"project.{field}" for field in exc.fields]
            ) from exc

        raw_issues = self.require_list(args, "issues", item_type=dict)
        issues = []
        for i, raw in enumerate(raw_issues):
            issue = validate_issue_input(raw, prefix=f"issues[{i}]")
            if issue["teamId"] not in team_ids:
                raise InvalidParamsError(
                    f"issues[{i}]: teamId {issue['teamId']} is not one of the project's teamIds",
                    [f"issues[{i}].teamId"],
                )
            issues.append(issue)

        data = await facade.create_project_with_issues(
            self.pick(project, PROJECT_CREATE_FIELDS), issues
        )
        created_project = data["projectCreate"]["project"]
        created_issues = data["issueBatchCreate"].get("issues") or []

        listing = "\n".join(
            f"- {issue.get('identifier')}: {issue.get('title')}" for issue in created_issues
        )
        text = (
            f"Successfully created project with issues\n"
            f"Project: {created_project.get('name')}\n"
            f"Project URL: {created_project.get('url')}\n"
            f"Issues created: {len(created_issues)}"
        )
        if listing:
            text += f"\n{listing}"
        return self.create_response(
            text, {"project": created_project, "issues": created_issues}
        )

    async def handle_get_project(self, args: Dict[str, Any]) -> types.CallToolResult:
        facade = self.verify_auth()
        self.validate_required_params(args, ["id"])

        data = await facade.get_project(args["id"])
        project = self.require_entity(data, "project", "get project")

        teams = ", ".join(team.get("name", "") for team in self.nodes(project.get("teams")))
        text = (
            f"Project: {project.get('name')}\n"
            f"ID: {project.get('id')}\n"
            f"Description: {project.get('description') or 'None'}\n"
            f"Teams: {teams or 'None'}\n"
            f"URL: {project.get('url')}"
        )
        return self.create_response(text, {"project": project})

    async def handle_search_projects(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Finds projects whose name matches exactly."""
        facade = self.verify_auth()
        self.validate_required_params(args, ["name"])

        data = await facade.search_projects({"name": {"eq": args["name"]}})
        projects = self.nodes(data.get("projects"))

        if not projects:
            return self.create_response(
                f"No projects found with name {args['name']}", {"projects": []}
            )

        listing = "\n".join(
            f"- {project.get('name')}\n  ID: {project.get('id')}\n  URL: {project.get('url')}"
            for project in projects
        )
        return self.create_response(
            f"Found {len(projects)} projects:\n{listing}", {"projects": projects}
        )
