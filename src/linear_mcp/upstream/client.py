"""Lightweight async GraphQL transport for the Linear API.

A ``GraphQLClient`` is bound to one access key. The credential manager
builds a fresh instance whenever the key changes; the underlying HTTP
connection pool is shared via ``get_http_client()``.
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class GraphQLResponseError(Exception):
    """The request reached Linear but the body carried GraphQL ``errors``."""

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        messages = "; ".join(e.get("message", "Unknown error") for e in errors)
        super().__init__(f"GraphQL error: {messages}")


class MalformedResponseError(ValueError):
    """A 2xx response whose body is not a JSON object."""


class GraphQLClient:
    """Async GraphQL client that uses the shared HTTP client."""

    def __init__(
        self,
        endpoint: str,
        auth_header: str = "Authorization",
        auth_value: str = "",
        timeout: Optional[float] = None,
    ):
        self.endpoint = endpoint
        self.auth_header = auth_header
        self.auth_value = auth_value
        self.timeout = timeout

    async def raw_request(
        self,
        document: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Execute a single GraphQL document.

        Args:
            document: GraphQL query or mutation text.
            variables: Optional variables; omitted from the payload when empty.

        Returns:
            ``{"data": {...}}``. A missing ``data`` key comes back as ``{}``.

        Raises:
            httpx.HTTPError: On network failures or non-2xx status codes.
            GraphQLResponseError: If the response contains GraphQL errors.
            MalformedResponseError: If the body is not a JSON object.
        """
        from ..http_client import get_http_client

        payload: Dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables

        client = get_http_client(self.timeout)
        response = await client.post(
            self.endpoint,
            json=payload,
            headers={
                self.auth_header: self.auth_value,
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Response body is not JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(body).__name__}"
            )

        if body.get("errors"):
            logger.debug("GraphQL errors from %s: %s", self.endpoint, body["errors"])
            raise GraphQLResponseError(body["errors"])

        return {"data": body.get("data") or {}}
