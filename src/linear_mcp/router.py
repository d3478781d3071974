"""Closed mapping from tool ids to handler methods."""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp import types

from .exceptions import LinearMCPError, UnknownToolError
from .handlers import (
    AuthHandler,
    InitiativeHandler,
    IssueHandler,
    ProjectHandler,
    TeamHandler,
    UserHandler,
)
from .observability.logging import clear_log_context, set_log_context
from .observability.metrics import record_tool_call

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    AUTH = "linear_auth"
    AUTH_CALLBACK = "linear_auth_callback"
    CREATE_ISSUE = "linear_create_issue"
    CREATE_ISSUES = "linear_create_issues"
    BULK_UPDATE_ISSUES = "linear_bulk_update_issues"
    SEARCH_ISSUES = "linear_search_issues"
    DELETE_ISSUE = "linear_delete_issue"
    DELETE_ISSUES = "linear_delete_issues"
    CREATE_PROJECT_WITH_ISSUES = "linear_create_project_with_issues"
    GET_PROJECT = "linear_get_project"
    SEARCH_PROJECTS = "linear_search_projects"
    GET_TEAMS = "linear_get_teams"
    GET_USER = "linear_get_user"
    CREATE_INITIATIVE = "linear_create_initiative"
    UPDATE_INITIATIVE = "linear_update_initiative"
    LIST_INITIATIVES = "linear_list_initiatives"
    GET_INITIATIVE = "linear_get_initiative"
    DELETE_INITIATIVE = "linear_delete_initiative"
    LINK_PROJECT_TO_INITIATIVE = "linear_link_project_to_initiative"
    UNLINK_PROJECT_FROM_INITIATIVE = "linear_unlink_project_from_initiative"


TOOL_IDS = frozenset(tool.value for tool in ToolName)

# tool -> (handler family, method name)
_ROUTES = {
    ToolName.AUTH: ("auth", "handle_auth"),
    ToolName.AUTH_CALLBACK: ("auth", "handle_auth_callback"),
    ToolName.CREATE_ISSUE: ("issue", "handle_create_issue"),
    ToolName.CREATE_ISSUES: ("issue", "handle_create_issues"),
    ToolName.BULK_UPDATE_ISSUES: ("issue", "handle_bulk_update_issues"),
    ToolName.SEARCH_ISSUES: ("issue", "handle_search_issues"),
    ToolName.DELETE_ISSUE: ("issue", "handle_delete_issue"),
    ToolName.DELETE_ISSUES: ("issue", "handle_delete_issues"),
    ToolName.CREATE_PROJECT_WITH_ISSUES: ("project", "handle_create_project_with_issues"),
    ToolName.GET_PROJECT: ("project", "handle_get_project"),
    ToolName.SEARCH_PROJECTS: ("project", "handle_search_projects"),
    ToolName.GET_TEAMS: ("team", "handle_get_teams"),
    ToolName.GET_USER: ("user", "handle_get_user"),
    ToolName.CREATE_INITIATIVE: ("initiative", "handle_create_initiative"),
    ToolName.UPDATE_INITIATIVE: ("initiative", "handle_update_initiative"),
    ToolName.LIST_INITIATIVES: ("initiative", "handle_list_initiatives"),
    ToolName.GET_INITIATIVE: ("initiative", "handle_get_initiative"),
    ToolName.DELETE_INITIATIVE: ("initiative", "handle_delete_initiative"),
    ToolName.LINK_PROJECT_TO_INITIATIVE: ("initiative", "handle_link_project_to_initiative"),
    ToolName.UNLINK_PROJECT_FROM_INITIATIVE: (
        "initiative",
        "handle_unlink_project_from_initiative",
    ),
}


@dataclass(frozen=True)
class HandlerSet:
    auth: AuthHandler
    issue: IssueHandler
    project: ProjectHandler
    team: TeamHandler
    user: UserHandler
    initiative: InitiativeHandler


@dataclass(frozen=True)
class ToolRoute:
    tool: ToolName
    handler: Any
    method_name: str

    @property
    def method(self) -> Callable[[Dict[str, Any]], Awaitable[types.CallToolResult]]:
        return getattr(self.handler, self.method_name)


def error_result(message: str, details: Optional[Dict[str, Any]] = None) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        structuredContent=details,
        isError=True,
    )


class ToolRouter:
    """Resolves tool ids to handler methods and runs them.

    The mapping is built once from the handler set and never changes. Lookup
    is exact: no aliasing, no prefix matching.
    """

    def __init__(self, handlers: HandlerSet):
        self._routes: Dict[ToolName, ToolRoute] = {
            tool: ToolRoute(tool, getattr(handlers, family), method_name)
            for tool, (family, method_name) in _ROUTES.items()
        }

    def resolve(self, tool_id: str) -> ToolRoute:
        try:
            return self._routes[ToolName(tool_id)]
        except ValueError:
            raise UnknownToolError(tool_id) from None

    async def dispatch(
        self, tool_id: str, arguments: Optional[Dict[str, Any]] = None
    ) -> types.CallToolResult:
        """Run one tool call. Never raises; failures come back as error results."""
        set_log_context(tool_name=tool_id, request_id=uuid.uuid4().hex[:12])
        start = time.perf_counter()
        status = "error"
        try:
            route = self.resolve(tool_id)
            logger.info("Tool call: %s -> %s", tool_id, route.method_name)
            result = await route.method(arguments or {})
            status = "success"
            return result
        except LinearMCPError as e:
            logger.warning("Tool %s failed: %s: %s", tool_id, e.kind, e.message)
            return error_result(f"{e.kind}: {e.message}", e.details())
        except Exception as e:
            logger.exception("Unexpected error in tool %s", tool_id)
            return error_result(
                f"InternalError: {type(e).__name__}: {e}",
                {"kind": "InternalError", "message": str(e)},
            )
        finally:
            record_tool_call(
                tool_name=tool_id if tool_id in TOOL_IDS else "unknown",
                status=status,
                duration=time.perf_counter() - start,
            )
            clear_log_context()
