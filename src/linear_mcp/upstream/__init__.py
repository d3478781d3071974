"""Upstream access: GraphQL transport, documents and the typed query facade."""

from .client import GraphQLClient, GraphQLResponseError, MalformedResponseError
from .facade import LinearQueryFacade

__all__ = ["GraphQLClient", "GraphQLResponseError", "LinearQueryFacade", "MalformedResponseError"]
