"""One adapter session: credential manager, handlers and router wired together."""

import logging
from typing import Any, Dict, Optional

from mcp import types

from .auth.credentials import CredentialManager
from .config import Settings
from .exceptions import LinearMCPError
from .handlers import (
    AuthHandler,
    InitiativeHandler,
    IssueHandler,
    ProjectHandler,
    TeamHandler,
    UserHandler,
)
from .handlers.base import FacadeFactory
from .observability.metrics import record_token_refresh
from .router import HandlerSet, ToolName, ToolRouter, error_result
from .upstream.facade import LinearQueryFacade

logger = logging.getLogger(__name__)

# Tools that must keep working when the current token cannot be refreshed
_AUTH_TOOLS = frozenset({ToolName.AUTH.value, ToolName.AUTH_CALLBACK.value})


class LinearSession:
    """Explicit session object; nothing here is process-global."""

    def __init__(
        self,
        auth: CredentialManager,
        facade_factory: FacadeFactory = LinearQueryFacade,
    ):
        self.auth = auth
        self.handlers = HandlerSet(
            auth=AuthHandler(auth, facade_factory),
            issue=IssueHandler(auth, facade_factory),
            project=ProjectHandler(auth, facade_factory),
            team=TeamHandler(auth, facade_factory),
            user=UserHandler(auth, facade_factory),
            initiative=InitiativeHandler(auth, facade_factory),
        )
        self.router = ToolRouter(self.handlers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LinearSession":
        """Build a session and install the credential configured in ``settings``.

        Raises:
            InvalidConfigError: If the configured credential is incomplete.
        """
        auth = CredentialManager(
            api_url=settings.linear_api_url,
            authorize_url=settings.linear_oauth_authorize_url,
            token_url=settings.linear_oauth_token_url,
            timeout=settings.request_timeout,
        )
        credential = settings.get_credential()
        if credential is not None:
            auth.initialize(credential)
        else:
            logger.info("No Linear credential configured; use linear_auth to start OAuth")
        return cls(auth)

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> types.CallToolResult:
        """Refresh the OAuth token if it is about to expire, then dispatch."""
        if name not in _AUTH_TOOLS and self.auth.needs_refresh():
            try:
                await self.auth.refresh()
                record_token_refresh("success")
            except LinearMCPError as e:
                record_token_refresh("error")
                logger.warning("Token refresh before %s failed: %s", name, e)
                return error_result(f"{e.kind}: {e.message}", e.details())
        return await self.router.dispatch(name, arguments)
