"""Shared async HTTP client.

One ``httpx.AsyncClient`` (and its connection pool) is reused by the GraphQL
transport and the OAuth token exchange. Call ``close_http_client()`` on
shutdown.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_client: Optional[httpx.AsyncClient] = None


def get_http_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """Return the process-wide client, creating it on first use."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or DEFAULT_TIMEOUT),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        logger.debug("Created shared HTTP client (timeout=%ss)", timeout or DEFAULT_TIMEOUT)
    return _client


async def close_http_client() -> None:
    """Close the shared client if it was created."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed shared HTTP client")
    _client = None
