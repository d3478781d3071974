"""Error taxonomy for the Linear MCP adapter.

Handlers and the query facade raise these; ``ToolRouter.dispatch`` is the one
place that turns them into an error ``CallToolResult``. Each class carries a
stable ``kind`` string that prefixes the message returned to the caller.
"""

from typing import Any, Dict, Iterable, Optional


class LinearMCPError(Exception):
    """Base exception for all adapter errors."""

    kind = "Error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def details(self) -> Dict[str, Any]:
        """Structured error payload returned alongside the text message."""
        return {"kind": self.kind, "message": self.message}


class InvalidConfigError(LinearMCPError):
    """Credential configuration is incomplete or malformed."""

    kind = "InvalidConfig"


class InvalidParamsError(LinearMCPError):
    """Tool arguments are missing or have the wrong shape."""

    kind = "InvalidParams"

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {**super().details(), "fields": self.fields}


class NotInitializedError(LinearMCPError):
    """An OAuth-only operation was attempted without an OAuth credential."""

    kind = "NotInitialized"


class NotAuthenticatedError(LinearMCPError):
    """No authenticated transport is available."""

    kind = "NotAuthenticated"


class TokenExchangeError(LinearMCPError):
    """The token endpoint rejected a code or refresh-token exchange."""

    kind = "TokenExchangeFailed"

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        status_text: str = "",
        response_body: str = "",
    ):
        self.status_code = status_code
        self.status_text = status_text
        self.response_body = response_body
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {**super().details(), "status": self.status_code, "statusText": self.status_text}


class OperationFailedError(LinearMCPError):
    """Upstream answered but reported a business-level failure."""

    kind = "OperationFailed"

    def __init__(self, message: str, operation: str = "", entity: str = ""):
        self.operation = operation
        self.entity = entity
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {**super().details(), "operation": self.operation, "entity": self.entity}


class CompositeOperationError(LinearMCPError):
    """One step of a multi-call operation failed.

    ``parent_id`` is set when the first step already committed, so the
    caller can find and clean up the orphaned parent entity.
    """

    kind = "CompositeOperationFailed"

    def __init__(
        self,
        message: str,
        operation: str = "",
        step: str = "",
        parent_id: Optional[str] = None,
    ):
        self.operation = operation
        self.step = step
        self.parent_id = parent_id
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {
            **super().details(),
            "operation": self.operation,
            "step": self.step,
            "parentId": self.parent_id,
        }


class TransportError(LinearMCPError):
    """Network or HTTP failure while talking to Linear."""

    kind = "TransportError"

    def __init__(self, operation: str, upstream_message: str, status_code: int = 0):
        self.operation = operation
        self.upstream_message = upstream_message
        self.status_code = status_code
        super().__init__(f"{operation} failed: {upstream_message}")

    def details(self) -> Dict[str, Any]:
        return {**super().details(), "operation": self.operation}


class UnknownToolError(LinearMCPError):
    """No route exists for the requested tool id."""

    kind = "UnknownTool"

    def __init__(self, tool_id: str):
        self.tool_id = tool_id
        super().__init__(f"Unknown tool: {tool_id}")
