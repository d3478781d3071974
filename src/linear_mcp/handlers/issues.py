"""Issue tools: create, batch create, bulk update, search and delete."""

import logging
from typing import Any, Dict, List

from mcp import types

from ..exceptions import InvalidParamsError
from ..upstream.facade import DEFAULT_ORDER_BY, DEFAULT_PAGE_SIZE
from .base import BaseHandler

logger = logging.getLogger(__name__)

ISSUE_CREATE_FIELDS = (
    "title",
    "description",
    "teamId",
    "assigneeId",
    "priority",
    "estimate",
    "projectId",
    "labelIds",
    "stateId",
    "createAsUser",
    "displayIconUrl",
)

ISSUE_UPDATE_FIELDS = ("stateId", "assigneeId", "priority", "estimate")


def validate_issue_input(issue: Any, prefix: str = "") -> Dict[str, Any]:
    """Check one issue-create payload and return only the fields Linear accepts.

    ``prefix`` (e.g. ``issues[2]``) is prepended to the reported field names
    for nested entries.
    """
    if not isinstance(issue, dict):
        raise InvalidParamsError(f"{prefix or 'issue'} must be an object", [prefix or "issue"])
    try:
        BaseHandler.validate_required_params(issue, ["title", "description", "teamId"])
        BaseHandler.validate_priority(issue)
        BaseHandler.validate_number(issue, "estimate")
        if issue.get("labelIds") is not None:
            BaseHandler.require_list(issue, "labelIds", allow_empty=True)
    except InvalidParamsError as exc:
        if not prefix:
            raise
        fields = [f"{prefix}.{field}" for field in exc.fields]
        raise InvalidParamsError(f"{prefix}: {exc.message}", fields) from exc
    return BaseHandler.pick(issue, ISSUE_CREATE_FIELDS)


class IssueHandler(BaseHandler):
    """Handler for issue-related operations."""

    entity = "issue"

    @staticmethod
    def build_search_filter(args: Dict[str, Any]) -> Dict[str, Any]:
        """Translate search tool arguments into a Linear ``IssueFilter``."""
        filter_: Dict[str, Any] = {}
        query = args.get("query")
        if query:
            filter_["or"] = [
                {"title": {"containsIgnoreCase": query}},
                {"description": {"containsIgnoreCase": query}},
            ]
        if args.get("teamIds"):
            filter_["team"] = {"id": {"in": args["teamIds"]}}
        if args.get("assigneeIds"):
            filter_["assignee"] = {"id": {"in": args["assigneeIds"]}}
        if args.get("states"):
            filter_["state"] = {"name": {"in": args["states"]}}
        if args.get("priority") is not None:
            filter_["priority"] = {"eq": args["priority"]}
        return filter_

    # -- tools -------------------------------------------------------------

    async def handle_create_issue(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Creates a single issue."""
        facade = self.verify_auth()
        input_data = validate_issue_input(args)

        data = await facade.create_issue(input_data)
        payload = self.require_payload(data, "issueCreate", "create issue", "issue")
        issue = payload["issue"]

        lines = [
            "Successfully created issue",
            f"Issue: {issue.get('identifier')}",
            f"Title: {issue.get('title')}",
            f"URL: {issue.get('url')}",
        ]
        if issue.get("project"):
            lines.append(f"Project: {issue['project'].get('name')}")
        return self.create_response("\n".join(lines), {"issue": issue})

    async def handle_create_issues(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Creates several issues in one batch call."""
        facade = self.verify_auth()
        raw_issues = self.require_list(args, "issues", item_type=dict)
        issues = [
            validate_issue_input(issue, prefix=f"issues[{i}]")
            for i, issue in enumerate(raw_issues)
        ]

        data = await facade.create_issues(issues)
        payload = self.require_payload(data, "issueBatchCreate", "create issues", "issues")
        created: List[Dict[str, Any]] = payload["issues"]

        summary = "\n".join(
            f"- {issue.get('identifier')}: {issue.get('title')}\n  URL: {issue.get('url')}"
            for issue in created
        )
        return self.create_response(
            f"Successfully created {len(created)} issues:\n{summary}",
            {"issues": created},
        )

    async def handle_bulk_update_issues(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Applies one shared update to many issues."""
        facade = self.verify_auth()
        self.validate_required_params(args, ["issueIds", "update"])
        issue_ids = self.require_list(args, "issueIds")
        update = args["update"]
        if not isinstance(update, dict):
            raise InvalidParamsError("update must be an object", ["update"])
        self.validate_priority(update)
        self.validate_number(update, "estimate")
        update_input = self.pick(update, ISSUE_UPDATE_FIELDS)
        if not update_input:
            raise InvalidParamsError(
                f"update must set at least one of: {', '.join(ISSUE_UPDATE_FIELDS)}", ["update"]
            )

        data = await facade.update_issues(issue_ids, update_input)
        payload = self.require_payload(data, "issueBatchUpdate", "update issues")
        updated = payload.get("issues") or []

        summary = "\n".join(
            f"- {issue.get('identifier')}: {issue.get('title')}"
            f" ({(issue.get('state') or {}).get('name', 'unknown state')})"
            for issue in updated
        )
        text = f"Successfully updated {len(updated)} issues"
        if summary:
            text += f":\n{summary}"
        return self.create_response(text, {"success": True, "issues": updated})

    async def handle_search_issues(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Searches issues; returns one page plus the continuation cursor."""
        facade = self.verify_auth()
        self.validate_priority(args)
        for field in ("teamIds", "assigneeIds", "states"):
            if args.get(field) is not None:
                self.require_list(args, field, allow_empty=True)
        first = args.get("first", DEFAULT_PAGE_SIZE)
        if isinstance(first, bool) or not isinstance(first, int) or first < 1:
            raise InvalidParamsError("first must be a positive integer", ["first"])

        data = await facade.search_issues(
            filter=self.build_search_filter(args),
            first=first,
            after=args.get("after"),
            order_by=args.get("orderBy") or DEFAULT_ORDER_BY,
        )
        connection = data.get("issues") or {}
        issues = self.nodes(connection)
        page = self.page_info(connection)

        if not issues:
            text = "No issues found"
        else:
            listing = "\n".join(
                f"- {issue.get('identifier')}: {issue.get('title')}\n"
                f"  Status: {(issue.get('state') or {}).get('name', 'Unknown')}\n"
                f"  Assignee: {(issue.get('assignee') or {}).get('name', 'Unassigned')}\n"
                f"  Priority: {issue.get('priority')}\n"
                f"  URL: {issue.get('url')}"
                for issue in issues
            )
            text = f"Found {len(issues)} issues:\n{listing}"
        if page["hasNextPage"]:
            text += f"\n\nMore issues available. Use cursor: {page['endCursor']}"

        return self.create_response(text, {"issues": issues, "pageInfo": page})

    async def handle_delete_issue(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Deletes one issue."""
        facade = self.verify_auth()
        self.validate_required_params(args, ["id"])

        data = await facade.delete_issue(args["id"])
        self.require_payload(data, "issueDelete", "delete issue")
        return self.create_response(
            f"Successfully deleted issue {args['id']}", {"success": True, "id": args["id"]}
        )

    async def handle_delete_issues(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Deletes many issues in one request; reports only the aggregate result."""
        facade = self.verify_auth()
        ids = self.require_list(args, "ids")

        data = await facade.delete_issues(ids)
        self.require_payload(data, "issueDelete", "delete issues")
        return self.create_response(
            f"Successfully deleted {len(ids)} issues: {', '.join(ids)}",
            {"success": True, "ids": ids},
        )
