"""Shared control template for feature handlers.

Every handler operation follows the same sequence:

1. ``verify_auth()`` captures the current transport (``NotAuthenticatedError``
   if there is none) and wraps it in a facade.
2. ``validate_required_params()`` and the shape checks reject bad input with
   ``InvalidParamsError`` before anything goes upstream.
3. Exactly one facade call (or the documented composite pair).
4. ``require_payload()`` turns a false success flag or missing payload into
   ``OperationFailedError``.
5. ``create_response()`` builds the result from upstream values verbatim.

Handlers raise; ``ToolRouter.dispatch`` converts raised errors into error
results.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from mcp import types

from ..auth.credentials import CredentialManager
from ..exceptions import InvalidParamsError, OperationFailedError
from ..upstream.facade import LinearQueryFacade, Transport

logger = logging.getLogger(__name__)

FacadeFactory = Callable[[Transport], LinearQueryFacade]


class BaseHandler:
    """Base class for all feature handlers."""

    #: Entity family name used in failure messages.
    entity = ""

    def __init__(
        self,
        auth: CredentialManager,
        facade_factory: FacadeFactory = LinearQueryFacade,
    ):
        self.auth = auth
        self._facade_factory = facade_factory

    # -- step 1 ------------------------------------------------------------

    def verify_auth(self) -> LinearQueryFacade:
        """Capture the current transport; raises ``NotAuthenticatedError``."""
        transport = self.auth.current_transport()
        return self._facade_factory(transport)

    # -- step 2 ------------------------------------------------------------

    @staticmethod
    def validate_required_params(args: Dict[str, Any], required: Iterable[str]) -> None:
        """Reject missing, ``None`` or empty-string required fields."""
        missing = [
            field
            for field in required
            if field not in args or args[field] is None or args[field] == ""
        ]
        if missing:
            raise InvalidParamsError(
                f"Missing required parameters: {', '.join(missing)}", missing
            )

    @staticmethod
    def require_list(
        args: Dict[str, Any],
        field: str,
        item_type: type = str,
        allow_empty: bool = False,
    ) -> List[Any]:
        value = args.get(field)
        if not isinstance(value, list):
            raise InvalidParamsError(f"{field} must be an array", [field])
        if not value and not allow_empty:
            raise InvalidParamsError(f"{field} must contain at least one item", [field])
        bad = [i for i, item in enumerate(value) if not isinstance(item, item_type)]
        if bad:
            raise InvalidParamsError(
                f"{field} items at positions {bad} must be {item_type.__name__}", [field]
            )
        return value

    @staticmethod
    def validate_priority(args: Dict[str, Any], field: str = "priority") -> None:
        if field not in args or args[field] is None:
            return
        value = args[field]
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 4:
            raise InvalidParamsError(f"{field} must be an integer between 0 and 4", [field])

    @staticmethod
    def validate_number(args: Dict[str, Any], field: str) -> None:
        if field not in args or args[field] is None:
            return
        value = args[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidParamsError(f"{field} must be a number", [field])

    @staticmethod
    def pick(args: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
        """Copy the keys that are present and not ``None``."""
        return {key: args[key] for key in keys if args.get(key) is not None}

    # -- step 4 ------------------------------------------------------------

    def require_payload(
        self,
        data: Dict[str, Any],
        root: str,
        operation: str,
        payload_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return ``data[root]`` after checking its success flag and payload.

        Raises:
            OperationFailedError: If ``success`` is not true, or ``payload_key``
                is given and absent from the payload.
        """
        payload = data.get(root) or {}
        if not payload.get("success") or (payload_key and not payload.get(payload_key)):
            logger.info("Linear reported failure for %s", operation)
            raise OperationFailedError(
                f"Failed to {operation}: Linear did not report success",
                operation=operation,
                entity=self.entity,
            )
        return payload

    def require_entity(self, data: Dict[str, Any], root: str, operation: str) -> Dict[str, Any]:
        """Return ``data[root]`` for queries, failing when upstream returned nothing."""
        entity = data.get(root)
        if not entity:
            raise OperationFailedError(
                f"Failed to {operation}: {self.entity or root} not found",
                operation=operation,
                entity=self.entity,
            )
        return entity

    # -- step 5 ------------------------------------------------------------

    @staticmethod
    def create_response(
        text: str,
        structured: Optional[Dict[str, Any]] = None,
    ) -> types.CallToolResult:
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=text)],
            structuredContent=structured,
            isError=False,
        )

    @staticmethod
    def page_info(connection: Dict[str, Any]) -> Dict[str, Any]:
        info = connection.get("pageInfo") or {}
        return {
            "hasNextPage": bool(info.get("hasNextPage")),
            "endCursor": info.get("endCursor"),
        }

    @staticmethod
    def nodes(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return (connection or {}).get("nodes") or []
