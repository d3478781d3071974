"""OAuth tools: start the authorization flow and complete the callback."""

import logging
from typing import Any, Dict

from mcp import types

from ..auth.credentials import OAuthCredential
from .base import BaseHandler

logger = logging.getLogger(__name__)


class AuthHandler(BaseHandler):
    """Handler for the OAuth flow. Neither tool needs a prior transport."""

    entity = "auth"

    async def handle_auth(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Install an OAuth client registration and return the consent URL."""
        self.validate_required_params(args, ["clientId", "clientSecret", "redirectUri"])

        self.auth.initialize(
            OAuthCredential(
                client_id=args["clientId"],
                client_secret=args["clientSecret"],
                redirect_uri=args["redirectUri"],
            )
        )
        url = self.auth.build_authorization_url()

        return self.create_response(
            f"Please visit the following URL to authorize the application:\n{url}",
            {"authorizationUrl": url},
        )

    async def handle_auth_callback(self, args: Dict[str, Any]) -> types.CallToolResult:
        """Exchange the authorization code for tokens."""
        self.validate_required_params(args, ["code"])

        token_state = await self.auth.exchange_code(args["code"], args.get("state"))

        expires_at = token_state.expires_at.isoformat()
        return self.create_response(
            f"Successfully authenticated with Linear. Token expires at {expires_at}",
            {"authenticated": True, "expiresAt": expires_at},
        )
