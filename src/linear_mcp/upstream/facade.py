"""Typed facade over the Linear GraphQL transport.

One method per logical operation. Each method issues exactly one request
through the transport it was constructed with (``create_project_with_issues``
is the one composite and issues two) and returns the ``data`` portion of the
response unchanged.

Errors are translated in ``_execute``:

- network / HTTP failures and non-JSON bodies become ``TransportError``
  carrying the operation;
- GraphQL ``errors`` in an otherwise successful response become
  ``OperationFailedError``.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..exceptions import CompositeOperationError, OperationFailedError, TransportError
from . import documents
from .client import GraphQLResponseError, MalformedResponseError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
DEFAULT_ORDER_BY = "updatedAt"


class Transport(Protocol):
    """Anything that can issue one GraphQL request."""

    async def raw_request(
        self, document: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        ...


class LinearQueryFacade:
    """Thin typed surface over one authenticated transport.

    A facade is cheap and is built per tool call around the transport the
    handler captured, so a concurrent token refresh never swaps the
    transport out from under an in-flight request.
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    async def _execute(
        self,
        operation: str,
        document: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        logger.debug("Linear %s", operation)
        try:
            response = await self.transport.raw_request(document, variables)
        except GraphQLResponseError as exc:
            raise OperationFailedError(f"{operation}: {exc}", operation=operation) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                operation,
                f"HTTP {exc.response.status_code}: {exc.response.text[:500]}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, OSError) as exc:
            raise TransportError(operation, str(exc) or type(exc).__name__) from exc
        except MalformedResponseError as exc:
            raise TransportError(operation, str(exc)) from exc

        return response.get("data") or {}

    # -- Issues ------------------------------------------------------------

    async def create_issue(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._execute(
            "create issue", documents.CREATE_ISSUE_MUTATION, {"input": input_data}
        )

    async def create_issues(self, issues: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._execute(
            "create issues",
            documents.CREATE_BATCH_ISSUES_MUTATION,
            {"input": {"issues": issues}},
        )

    async def update_issues(self, ids: List[str], update: Dict[str, Any]) -> Dict[str, Any]:
        """Apply one shared update to many issues.

        Only the aggregate ``success`` flag comes back from upstream; there is
        no per-issue result.
        """
        return await self._execute(
            "update issues",
            documents.UPDATE_ISSUES_MUTATION,
            {"ids": ids, "input": update},
        )

    async def search_issues(
        self,
        filter: Optional[Dict[str, Any]] = None,
        first: int = DEFAULT_PAGE_SIZE,
        after: Optional[str] = None,
        order_by: str = DEFAULT_ORDER_BY,
    ) -> Dict[str, Any]:
        """Fetch exactly one page of issues."""
        variables: Dict[str, Any] = {"first": first, "orderBy": order_by}
        if filter:
            variables["filter"] = filter
        if after:
            variables["after"] = after
        return await self._execute("search issues", documents.SEARCH_ISSUES_QUERY, variables)

    async def delete_issue(self, issue_id: str) -> Dict[str, Any]:
        return await self._execute(
            "delete issue", documents.DELETE_ISSUE_MUTATION, {"id": issue_id}
        )

    async def delete_issues(self, ids: List[str]) -> Dict[str, Any]:
        """Delete many issues in a single request.

        Returns ``{"issueDelete": {"success": bool}}`` where ``success`` is
        true only if every aliased delete reported success.
        """
        data = await self._execute(
            "delete issues",
            documents.build_delete_issues_mutation(len(ids)),
            documents.delete_issues_variables(ids),
        )
        success = bool(data) and all(
            (data.get(f"delete{i}") or {}).get("success", False) for i in range(len(ids))
        )
        return {"issueDelete": {"success": success}}

    # -- Projects ----------------------------------------------------------

    async def create_project(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._execute(
            "create project", documents.CREATE_PROJECT_MUTATION, {"input": input_data}
        )

    async def create_project_with_issues(
        self,
        project: Dict[str, Any],
        issues: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Create a project, then create its issues referencing the new project.

        Not atomic: if the issue step fails the project stays created and the
        raised ``CompositeOperationError`` carries its id as ``parent_id``.
        """
        operation = "create project with issues"
        try:
            project_result = await self.create_project(project)
        except (OperationFailedError, TransportError) as exc:
            raise CompositeOperationError(
                f"Failed to create project: {exc}", operation=operation, step="project"
            ) from exc

        project_payload = project_result.get("projectCreate") or {}
        created = project_payload.get("project") or {}
        if not project_payload.get("success") or not created.get("id"):
            raise CompositeOperationError(
                "Failed to create project: upstream did not report success",
                operation=operation,
                step="project",
            )

        project_id = created["id"]
        issues_with_project = [{**issue, "projectId": project_id} for issue in issues]

        try:
            issues_result = await self.create_issues(issues_with_project)
        except (OperationFailedError, TransportError) as exc:
            raise CompositeOperationError(
                f"Project {project_id} was created but its issues were not: {exc}",
                operation=operation,
                step="issues",
                parent_id=project_id,
            ) from exc

        batch_payload = issues_result.get("issueBatchCreate") or {}
        if not batch_payload.get("success"):
            raise CompositeOperationError(
                f"Project {project_id} was created but its issues were not: "
                "upstream did not report success",
                operation=operation,
                step="issues",
                parent_id=project_id,
            )

        return {
            "projectCreate": project_payload,
            "issueBatchCreate": batch_payload,
        }

    async def get_project(self, project_id: str) -> Dict[str, Any]:
        return await self._execute("get project", documents.GET_PROJECT_QUERY, {"id": project_id})

    async def search_projects(self, filter: Dict[str, Any]) -> Dict[str, Any]:
        return await self._execute(
            "search projects", documents.SEARCH_PROJECTS_QUERY, {"filter": filter}
        )

    # -- Teams and users ---------------------------------------------------

    async def get_teams(self) -> Dict[str, Any]:
        return await self._execute("get teams", documents.GET_TEAMS_QUERY)

    async def get_current_user(self) -> Dict[str, Any]:
        return await self._execute("get user", documents.GET_USER_QUERY)

    # -- Initiatives -------------------------------------------------------

    async def create_initiative(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._execute(
            "create initiative", documents.CREATE_INITIATIVE_MUTATION, {"input": input_data}
        )

    async def update_initiative(
        self, initiative_id: str, input_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._execute(
            "update initiative",
            documents.UPDATE_INITIATIVE_MUTATION,
            {"id": initiative_id, "input": input_data},
        )

    async def list_initiatives(
        self,
        first: int = DEFAULT_PAGE_SIZE,
        after: Optional[str] = None,
        include_archived: bool = False,
        order_by: Optional[str] = None,
        filter: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Fetch exactly one page of initiatives."""
        variables: Dict[str, Any] = {"first": first, "includeArchived": include_archived}
        if after:
            variables["after"] = after
        if order_by:
            variables["orderBy"] = order_by
        if filter:
            variables["filter"] = filter
        return await self._execute(
            "list initiatives", documents.LIST_INITIATIVES_QUERY, variables
        )

    async def get_initiative(self, initiative_id: str) -> Dict[str, Any]:
        return await self._execute(
            "get initiative", documents.GET_INITIATIVE_QUERY, {"id": initiative_id}
        )

    async def delete_initiative(self, initiative_id: str) -> Dict[str, Any]:
        return await self._execute(
            "delete initiative", documents.DELETE_INITIATIVE_MUTATION, {"id": initiative_id}
        )

    async def link_project_to_initiative(
        self, project_id: str, initiative_id: str
    ) -> Dict[str, Any]:
        return await self._execute(
            "link project to initiative",
            documents.UPDATE_PROJECT_INITIATIVE_MUTATION,
            {"id": project_id, "input": {"initiativeId": initiative_id}},
        )

    async def unlink_project_from_initiative(self, project_id: str) -> Dict[str, Any]:
        return await self._execute(
            "unlink project from initiative",
            documents.UPDATE_PROJECT_INITIATIVE_MUTATION,
            {"id": project_id, "input": {"initiativeId": None}},
        )
