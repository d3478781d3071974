"""Initiative tools: CRUD, listing, and project linking."""

import logging
from typing import Any, Dict, Optional

from mcp import types

from ..exceptions import InvalidParamsError
from ..upstream.facade import DEFAULT_PAGE_SIZE
from .base import BaseHandler

logger = logging.getLogger(__name__)

INITIATIVE_CREATE_FIELDS = (
    "name",
    "description",
    "color",
    "icon",
    "targetDate",
    "startedAt",
    "ownerId",
    "sortOrder",
)

INITIATIVE_UPDATE_FIELDS = INITIATIVE_CREATE_FIELDS + (
    "completedAt",
    "updateReminderFrequency",
    "updateReminderFrequencyInWeeks",
    "updateRemindersDay",
    "updateRemindersHour",
)


def _status(initiative: Dict[str, Any]) -> str:
    if initiative.get("completedAt"):
        return "Completed"
    if initiative.get("startedAt"):
        return "In Progress"
    return "Planned"


def _owner(initiative: Dict[str, Any]) -> str:
    return (initiative.get("owner") or {}).get("name") or "Not assigned"


def _check_range(args: Dict[str, Any], field: str, low: int, high: int) -> None:
    value: Optional[Any] = args.get(field)
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidParamsError(f"{field} must be an integer between {low} and {high}", [field])


class InitiativeHandler(BaseHandler):
    """Handler for initiative-related operations."""

    entity = "initiative"

    async def handle_create_initiative(self, args: Dict[str, Any]) -> types.CallToolResult:
        facade = self.verify_auth()
        self.validate_required_params(args, ["name"])
        self.validate_number(args, "sortOrder")

        data = await facade.create_initiative(self.pick(args, INITIATIVE_CREATE_FIELDS))
        payload = self.require_payload(
            data, "initiativeCreate", "create initiative", "initiative"
        )
        initiative = payload["initiative"]

        return self.create_response(
            "Successfully created initiative\n"
            f"Name: {initiative.get('name')}\n"
            f"URL: {initiative.get('url')}\n"
            f"Description: {initiative.get('description') or 'None'}\n"
            f"Target Date: {initiative.get('targetDate') or 'Not set'}\n"
            f"Owner: {_owner(initiative)}\n"
            f"Color: {initiative.get('color') or 'Default'}",
            {"initiative": initiative},
        )

    async def handle_update_initiative(self, args: Dict[str, Any]) -> types.CallToolResult:
        facade = self.verify_auth()
        self.validate_required_params(args, ["id"])
        self.validate_number(args, "sortOrder")
        self.validate_number(args, "updateReminderFrequency")
        self.validate_number(args, "updateReminderFrequencyInWeeks")
        _check_range(args, "updateRemindersDay", 0, 6)
        _check_range(args, "updateRemindersHour", 0, 23)

        update = self.pick(args, INITIATIVE_UPDATE_FIELDS)
        if not update:
            raise InvalidParamsError(
                "Nothing to update: provide at least one initiative field", ["id"]
            )

        data = await facade.update_initiative(args["id"], update)
        payload = self.require_payload(
            data, "initiativeUpdate", "update initiative", "initiative"
        )
        initiative = payload["initiative"]

        return self.create_response(
            "Successfully updated initiative\n"
            f"Name: {initiative.get('name')}\n"
            f"URL: {initiative.get('url')}",
            {"initiative": initiative},
        )

    async def handle_list_initiatives(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Lists one page of initiatives; the cursor is returned when more exist."""
        facade = self.verify_auth()
        first = args.get("first", DEFAULT_PAGE_SIZE)
        if isinstance(first, bool) or not isinstance(first, int) or first < 1:
            raise InvalidParamsError("first must be a positive integer", ["first"])
        filter_ = args.get("filter")
        if filter_ is not None and not isinstance(filter_, dict):
            raise InvalidParamsError("filter must be an object", ["filter"])

        data = await facade.list_initiatives(
            first=first,
            after=args.get("after"),
            include_archived=bool(args.get("includeArchived", False)),
            order_by=args.get("orderBy"),
            filter=filter_,
        )
        connection = data.get("initiatives") or {}
        initiatives = self.nodes(connection)
        page = self.page_info(connection)
        structured = {"initiatives": initiatives, "pageInfo": page}

        if not initiatives:
            return self.create_response("No initiatives found", structured)

        listing = "\n\n".join(
            f"- {initiative.get('name')}\n"
            f"  ID: {initiative.get('id')}\n"
            f"  Status: {_status(initiative)}\n"
            f"  Owner: {_owner(initiative)}\n"
            f"  Projects: {len(self.nodes(initiative.get('projects')))}\n"
            f"  Target Date: {initiative.get('targetDate') or 'Not set'}\n"
            f"  URL: {initiative.get('url')}"
            for initiative in initiatives
        )
        text = f"Found {len(initiatives)} initiatives:\n\n{listing}"
        if page["hasNextPage"]:
            text += f"\n\nMore initiatives available. Use cursor: {page['endCursor']}"
        return self.create_response(text, structured)

    async def handle_get_initiative(self, args: Dict[str, Any]) -> types.CallToolResult:
        facade = self.verify_auth()
        self.validate_required_params(args, ["id"])

        data = await facade.get_initiative(args["id"])
        initiative = self.require_entity(data, "initiative", "get initiative")

        content = initiative.get("content")
        projects = ", ".join(
            project.get("name", "") for project in self.nodes(initiative.get("projects"))
        )
        text = (
            "Initiative Details:\n"
            f"Name: {initiative.get('name')}\n"
            f"ID: {initiative.get('id')}\n"
            f"URL: {initiative.get('url')}\n"
            f"Status: {_status(initiative)}\n"
            f"Description: {initiative.get('description') or 'None'}\n"
            f"Content: {content[:100] + '...' if content else 'None'}\n"
            f"Owner: {_owner(initiative)}\n"
            f"Creator: {(initiative.get('creator') or {}).get('name') or 'Unknown'}\n"
            f"Color: {initiative.get('color') or 'Default'}\n"
            f"Icon: {initiative.get('icon') or 'None'}\n"
            f"Started At: {initiative.get('startedAt') or 'Not started'}\n"
            f"Target Date: {initiative.get('targetDate') or 'Not set'}\n"
            f"Completed At: {initiative.get('completedAt') or 'Not completed'}\n"
            f"Projects: {projects or 'None'}\n"
            f"Organization: {(initiative.get('organization') or {}).get('name') or 'Unknown'}"
        )
        return self.create_response(text, {"initiative": initiative})

    async def handle_delete_initiative(self, args: Dict[str, Any]) -> types.CallToolResult:
        facade = self.verify_auth()
        self.validate_required_params(args, ["id"])

        data = await facade.delete_initiative(args["id"])
        self.require_payload(data, "initiativeDelete", "delete initiative")
        return self.create_response(
            f"Successfully deleted initiative {args['id']}", {"success": True, "id": args["id"]}
        )

    async def handle_link_project_to_initiative(
        self, args: Dict[str, Any]
    ) -> types.CallToolResult:
        facade = self.verify_auth()
        self.validate_required_params(args, ["projectId", "initiativeId"])

        data = await facade.link_project_to_initiative(args["projectId"], args["initiativeId"])
        self.require_payload(data, "projectUpdate", "link project to initiative")
        return self.create_response(
            f"Successfully linked project {args['projectId']} "
            f"to initiative {args['initiativeId']}",
            {"projectId": args["projectId"], "initiativeId": args["initiativeId"]},
        )

    async def handle_unlink_project_from_initiative(
        self, args: Dict[str, Any]
    ) -> types.CallToolResult:
        # initiativeId is accepted for symmetry with link but not needed:
        # a project belongs to at most one initiative.
        facade = self.verify_auth()
        self.validate_required_params(args, ["projectId"])

        data = await facade.unlink_project_from_initiative(args["projectId"])
        self.require_payload(data, "projectUpdate", "unlink project from initiative")
        return self.create_response(
            f"Successfully unlinked project {args['projectId']} from its initiative",
            {"projectId": args["projectId"]},
        )
