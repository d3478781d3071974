"""Tool catalog published to MCP clients: one ``types.Tool`` per tool id."""

from typing import Any, Dict, List

from mcp import types

from .router import ToolName

PRIORITY_DESCRIPTION = "Priority (0-4): 0 none, 1 urgent, 2 high, 3 medium, 4 low"
ESTIMATE_DESCRIPTION = "Issue estimate points (typically 1, 2, 3, 5, 8, etc.)"
ORDER_BY = ["createdAt", "updatedAt"]


def _string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def _number(description: str) -> Dict[str, Any]:
    return {"type": "number", "description": description}


def _priority(description: str = PRIORITY_DESCRIPTION) -> Dict[str, Any]:
    return {"type": "integer", "minimum": 0, "maximum": 4, "description": description}


def _string_list(description: str, min_items: int = 0) -> Dict[str, Any]:
    schema = {"type": "array", "items": {"type": "string"}, "description": description}
    if min_items:
        schema["minItems"] = min_items
    return schema


def _object(properties: Dict[str, Any], required: List[str] = ()) -> Dict[str, Any]:
    schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    return schema


def _issue_schema(team_description: str = "Team ID", extended: bool = True) -> Dict[str, Any]:
    properties = {
        "title": _string("Issue title"),
        "description": _string("Issue description"),
        "teamId": _string(team_description),
    }
    if extended:
        properties.update(
            {
                "assigneeId": _string("Assignee user ID"),
                "priority": _priority(),
                "projectId": _string("Project ID"),
                "estimate": _number(ESTIMATE_DESCRIPTION),
                "labelIds": _string_list("Label IDs to apply"),
            }
        )
    return _object(properties, ["title", "description", "teamId"])


def _tool(name: ToolName, description: str, schema: Dict[str, Any]) -> types.Tool:
    return types.Tool(name=name.value, description=description, inputSchema=schema)


def _initiative_fields() -> Dict[str, Any]:
    return {
        "description": _string("Initiative description"),
        "color": _string("Initiative color (hex format)"),
        "icon": _string("Initiative icon"),
        "targetDate": _string("Target completion date (YYYY-MM-DD format)"),
        "startedAt": _string("Start date (ISO 8601 format)"),
        "ownerId": _string("User ID of the initiative owner"),
        "sortOrder": _number("Sort order within the organization"),
    }


def build_tool_catalog() -> List[types.Tool]:
    return [
        _tool(
            ToolName.AUTH,
            "Initialize OAuth flow with Linear",
            _object(
                {
                    "clientId": _string("Linear OAuth client ID"),
                    "clientSecret": _string("Linear OAuth client secret"),
                    "redirectUri": _string("OAuth redirect URI"),
                },
                ["clientId", "clientSecret", "redirectUri"],
            ),
        ),
        _tool(
            ToolName.AUTH_CALLBACK,
            "Handle OAuth callback",
            _object(
                {
                    "code": _string("OAuth authorization code"),
                    "state": _string("State value from the authorization URL"),
                },
                ["code"],
            ),
        ),
        _tool(
            ToolName.CREATE_ISSUE,
            "Create a new issue in Linear",
            _object(
                {
                    **_issue_schema()["properties"],
                    "createAsUser": _string("Name to display for the created issue"),
                    "displayIconUrl": _string("URL of the avatar to display"),
                },
                ["title", "description", "teamId"],
            ),
        ),
        _tool(
            ToolName.CREATE_ISSUES,
            "Create multiple issues at once",
            _object(
                {
                    "issues": {
                        "type": "array",
                        "items": _issue_schema(),
                        "minItems": 1,
                        "description": "List of issues to create",
                    }
                },
                ["issues"],
            ),
        ),
        _tool(
            ToolName.BULK_UPDATE_ISSUES,
            "Update multiple issues at once",
            _object(
                {
                    "issueIds": _string_list("List of issue IDs to update", min_items=1),
                    "update": _object(
                        {
                            "stateId": _string("New state ID"),
                            "assigneeId": _string("New assignee ID"),
                            "priority": _priority("New priority (0-4)"),
                            "estimate": _number(ESTIMATE_DESCRIPTION),
                        }
                    ),
                },
                ["issueIds", "update"],
            ),
        ),
        _tool(
            ToolName.SEARCH_ISSUES,
            "Search for issues with filtering and pagination",
            _object(
                {
                    "query": _string("Search query string"),
                    "teamIds": _string_list("Filter by team IDs"),
                    "assigneeIds": _string_list("Filter by assignee IDs"),
                    "states": _string_list("Filter by state names"),
                    "priority": _priority("Filter by priority (0-4)"),
                    "first": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Number of issues to return (default: 50)",
                    },
                    "after": _string("Cursor for pagination"),
                    "orderBy": {
                        "type": "string",
                        "enum": ORDER_BY,
                        "description": "Field to order by (default: updatedAt)",
                    },
                }
            ),
        ),
        _tool(
            ToolName.DELETE_ISSUE,
            "Delete an issue",
            _object({"id": _string("Issue identifier (e.g., ENG-123)")}, ["id"]),
        ),
        _tool(
            ToolName.DELETE_ISSUES,
            "Delete multiple issues",
            _object(
                {"ids": _string_list("List of issue identifiers to delete", min_items=1)},
                ["ids"],
            ),
        ),
        _tool(
            ToolName.CREATE_PROJECT_WITH_ISSUES,
            "Create a new project with associated issues. "
            "Note: Project requires teamIds (array) not teamId (single value).",
            _object(
                {
                    "project": _object(
                        {
                            "name": _string("Project name"),
                            "description": _string("Project description (optional)"),
                            "teamIds": _string_list(
                                "Array of team IDs this project belongs to (Required). "
                                "Use linear_get_teams to get available team IDs.",
                                min_items=1,
                            ),
                        },
                        ["name", "teamIds"],
                    ),
                    "issues": {
                        "type": "array",
                        "items": _issue_schema(
                            "Team ID (must match one of the project teamIds)", extended=False
                        ),
                        "minItems": 1,
                        "description": "List of issues to create with this project",
                    },
                },
                ["project", "issues"],
            ),
        ),
        _tool(
            ToolName.GET_PROJECT,
            "Get project information",
            _object({"id": _string("Project identifier")}, ["id"]),
        ),
        _tool(
            ToolName.SEARCH_PROJECTS,
            "Search for projects by name",
            _object({"name": _string("Project name to search for (exact match)")}, ["name"]),
        ),
        _tool(ToolName.GET_TEAMS, "Get all teams with their states and labels", _object({})),
        _tool(ToolName.GET_USER, "Get current user information", _object({})),
        _tool(
            ToolName.CREATE_INITIATIVE,
            "Create a new initiative in Linear",
            _object({"name": _string("Initiative name"), **_initiative_fields()}, ["name"]),
        ),
        _tool(
            ToolName.UPDATE_INITIATIVE,
            "Update an existing initiative",
            _object(
                {
                    "id": _string("Initiative ID to update"),
                    "name": _string("New name"),
                    **_initiative_fields(),
                    "completedAt": _string("Completion date (ISO 8601 format)"),
                    "updateReminderFrequency": _number("Reminder frequency"),
                    "updateReminderFrequencyInWeeks": _number("Reminder frequency in weeks"),
                    "updateRemindersDay": {
                        "type": "integer",
                        "minimum": 0,
                        "maximum": 6,
                        "description": "Day of week for reminders (0-6)",
                    },
                    "updateRemindersHour": {
                        "type": "integer",
                        "minimum": 0,
                        "maximum": 23,
                        "description": "Hour of day for reminders (0-23)",
                    },
                },
                ["id"],
            ),
        ),
        _tool(
            ToolName.LIST_INITIATIVES,
            "List initiatives with optional filtering and pagination",
            _object(
                {
                    "first": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Number of initiatives to return (default: 50)",
                    },
                    "after": _string("Cursor for pagination"),
                    "includeArchived": {
                        "type": "boolean",
                        "description": "Include archived initiatives",
                    },
                    "orderBy": {"type": "string", "enum": ORDER_BY, "description": "Field to order by"},
                    "filter": {"type": "object", "description": "Filter criteria"},
                }
            ),
        ),
        _tool(
            ToolName.GET_INITIATIVE,
            "Get a single initiative by ID",
            _object({"id": _string("Initiative ID")}, ["id"]),
        ),
        _tool(
            ToolName.DELETE_INITIATIVE,
            "Delete an initiative",
            _object({"id": _string("Initiative ID to delete")}, ["id"]),
        ),
        _tool(
            ToolName.LINK_PROJECT_TO_INITIATIVE,
            "Link a project to an initiative",
            _object(
                {
                    "projectId": _string("Project ID to link"),
                    "initiativeId": _string("Initiative ID to link to"),
                },
                ["projectId", "initiativeId"],
            ),
        ),
        _tool(
            ToolName.UNLINK_PROJECT_FROM_INITIATIVE,
            "Unlink a project from its initiative",
            _object(
                {
                    "projectId": _string("Project ID to unlink"),
                    "initiativeId": _string(
                        "Initiative ID to unlink from (optional, will unlink from any initiative)"
                    ),
                },
                ["projectId"],
            ),
        ),
    ]
