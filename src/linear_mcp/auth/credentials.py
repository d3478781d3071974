"""Credential lifecycle for the Linear API.

Holds the single active credential (personal API key or OAuth2 client
registration), the token state derived from it, and the GraphQL transport
bound to the current access key.

The manager never refreshes on its own: callers check ``needs_refresh()``
and call ``refresh()`` before consulting ``current_transport()``.
"""

import logging
import secrets
from collections import deque
import urllib.parse
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Deque, Dict, Optional, Union

import httpx

from ..exceptions import (
    InvalidConfigError,
    InvalidParamsError,
    NotAuthenticatedError,
    NotInitializedError,
    TokenExchangeError,
    TransportError,
)
from ..upstream.client import GraphQLClient

logger = logging.getLogger(__name__)

LINEAR_API = "https://api.linear.app/graphql"
LINEAR_AUTHORIZE_URL = "https://linear.app/oauth/authorize"
LINEAR_TOKEN_URL = "https://api.linear.app/oauth/token"

OAUTH_SCOPES = ["read", "write", "issues:create", "offline_access"]

# Refresh this long before the access token actually expires
REFRESH_MARGIN = timedelta(minutes=5)

# Only the most recently issued consent URLs can be completed
MAX_PENDING_STATES = 5

NEVER_EXPIRES = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class StaticKey:
    """A personal API key. Never expires, never refreshes."""

    value: str

    def __repr__(self) -> str:
        return "StaticKey(value='***')"


@dataclass(frozen=True)
class OAuthCredential:
    """An OAuth2 application registration."""

    client_id: str
    client_secret: str
    redirect_uri: str

    def __repr__(self) -> str:
        return (
            f"OAuthCredential(client_id='{self.client_id}', "
            f"redirect_uri='{self.redirect_uri}')"
        )


Credential = Union[StaticKey, OAuthCredential]


@dataclass(frozen=True)
class TokenState:
    """Access key, refresh token and expiry for the active credential."""

    access_key: str
    refresh_token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"TokenState(expires_at={self.expires_at.isoformat()})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialManager:
    """Owns authentication state for one session."""

    def __init__(
        self,
        api_url: str = LINEAR_API,
        authorize_url: str = LINEAR_AUTHORIZE_URL,
        token_url: str = LINEAR_TOKEN_URL,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.api_url = api_url
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.timeout = timeout
        self._clock = clock

        self._credential: Optional[Credential] = None
        self._token_state: Optional[TokenState] = None
        self._transport: Optional[GraphQLClient] = None
        self._pending_states: Deque[str] = deque(maxlen=MAX_PENDING_STATES)

    # -- state accessors ---------------------------------------------------

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def token_state(self) -> Optional[TokenState]:
        return self._token_state

    @property
    def is_oauth(self) -> bool:
        return isinstance(self._credential, OAuthCredential)

    # -- lifecycle ---------------------------------------------------------

    def initialize(self, credential: Credential) -> None:
        """Install a credential, replacing any previous one.

        A static key is usable immediately. An OAuth credential only records
        the client registration; tokens arrive via ``exchange_code``.

        Raises:
            InvalidConfigError: If an OAuth field is empty or the credential
                type is not recognised.
        """
        self._token_state = None
        self._transport = None
        self._pending_states.clear()

        if isinstance(credential, StaticKey):
            if not credential.value:
                raise InvalidConfigError("API key must not be empty")
            self._credential = credential
            self._install_token_state(
                TokenState(
                    access_key=credential.value,
                    refresh_token="",
                    expires_at=NEVER_EXPIRES,
                )
            )
            logger.info("Initialized Linear credential from API key")
            return

        if isinstance(credential, OAuthCredential):
            missing = [
                name
                for name in ("client_id", "client_secret", "redirect_uri")
                if not getattr(credential, name)
            ]
            if missing:
                self._credential = None
                raise InvalidConfigError(
                    f"Missing required OAuth parameters: {', '.join(missing)}"
                )
            self._credential = credential
            logger.info("Initialized Linear OAuth credential (client_id=%s)", credential.client_id)
            return

        self._credential = None
        raise InvalidConfigError(f"Unsupported credential type: {type(credential).__name__}")

    def build_authorization_url(self) -> str:
        """Build the Linear consent URL with a fresh anti-replay state."""
        credential = self._require_oauth()

        state = secrets.token_urlsafe(24)
        self._pending_states.append(state)

        params = {
            "client_id": credential.client_id,
            "redirect_uri": credential.redirect_uri,
            "response_type": "code",
            "scope": ",".join(OAUTH_SCOPES),
            "actor": "application",
            "state": state,
            "access_type": "offline",
        }
        return f"{self.authorize_url}?{urllib.parse.urlencode(params)}"

    async def exchange_code(self, code: str, state: Optional[str] = None) -> TokenState:
        """Exchange an authorization code for tokens.

        When ``state`` is given it must be one of the last
        ``MAX_PENDING_STATES`` issued by ``build_authorization_url``. It is
        consumed only once the exchange succeeds, so a failed attempt can be
        retried. On failure the previous token state (if any) is left untouched.
        """
        credential = self._require_oauth()

        if state is not None and state not in self._pending_states:
            raise InvalidParamsError("OAuth state does not match any pending authorization", ["state"])

        token_info = await self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "client_id": credential.client_id,
                "client_secret": credential.client_secret,
                "redirect_uri": credential.redirect_uri,
                "access_type": "offline",
            },
            action="code exchange",
        )
        token_state = self._token_state_from(token_info, previous_refresh_token="")
        self._install_token_state(token_state)
        if state is not None and state in self._pending_states:
            self._pending_states.remove(state)
        logger.info("OAuth code exchange succeeded; token expires at %s", token_state.expires_at.isoformat())
        return token_state

    async def refresh(self) -> TokenState:
        """Exchange the stored refresh token for a new access token."""
        if not self.is_oauth or not self._token_state or not self._token_state.refresh_token:
            raise NotInitializedError("OAuth not initialized or no refresh token available")
        credential = self._credential

        token_info = await self._request_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": self._token_state.refresh_token,
                "client_id": credential.client_id,
                "client_secret": credential.client_secret,
            },
            action="token refresh",
        )
        token_state = self._token_state_from(
            token_info, previous_refresh_token=self._token_state.refresh_token
        )
        self._install_token_state(token_state)
        logger.info("OAuth token refreshed; expires at %s", token_state.expires_at.isoformat())
        return token_state

    def set_token_state(self, token_state: TokenState) -> None:
        """Install a token state directly (session restore) and rebuild the transport."""
        self._install_token_state(token_state)

    # -- predicates --------------------------------------------------------

    def needs_refresh(self) -> bool:
        """True when an OAuth token is within ``REFRESH_MARGIN`` of expiry."""
        if self._token_state is None or not self.is_oauth:
            return False
        return self._clock() >= self._token_state.expires_at - REFRESH_MARGIN

    def is_authenticated(self) -> bool:
        return self._token_state is not None and self._transport is not None

    def current_transport(self) -> GraphQLClient:
        if self._transport is None:
            raise NotAuthenticatedError("Linear client not initialized; authenticate first")
        return self._transport

    # -- helpers -----------------------------------------------------------

    def _require_oauth(self) -> OAuthCredential:
        if not isinstance(self._credential, OAuthCredential):
            raise NotInitializedError("OAuth config not initialized")
        return self._credential

    def _install_token_state(self, token_state: TokenState) -> None:
        self._token_state = token_state
        self._transport = self._build_transport(token_state.access_key)

    def _build_transport(self, access_key: str) -> GraphQLClient:
        # Personal API keys go in the header as-is; OAuth tokens are bearer tokens
        auth_value = access_key if isinstance(self._credential, StaticKey) else f"Bearer {access_key}"
        return GraphQLClient(
            endpoint=self.api_url,
            auth_header="Authorization",
            auth_value=auth_value,
            timeout=self.timeout,
        )

    def _token_state_from(self, token_info: Dict, previous_refresh_token: str) -> TokenState:
        access_token = token_info.get("access_token")
        if not access_token:
            raise TokenExchangeError("No access token received", status_code=200)

        try:
            expires_in = float(token_info.get("expires_in", 0))
        except (TypeError, ValueError):
            raise TokenExchangeError(
                f"Invalid expires_in in token response: {token_info.get('expires_in')!r}",
                status_code=200,
            )

        return TokenState(
            access_key=access_token,
            refresh_token=token_info.get("refresh_token") or previous_refresh_token,
            expires_at=self._clock() + timedelta(seconds=expires_in),
        )

    async def _request_token(self, form: Dict[str, str], action: str) -> Dict:
        """POST a form-encoded grant to the token endpoint and parse the JSON body."""
        from ..http_client import get_http_client

        client = get_http_client(self.timeout)
        try:
            response = await client.post(
                self.token_url,
                data=form,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"OAuth {action}", str(exc)) from exc

        if not response.is_success:
            logger.warning("OAuth %s rejected: HTTP %d", action, response.status_code)
            raise TokenExchangeError(
                f"OAuth {action} failed: {response.reason_phrase}. Response: {response.text}",
                status_code=response.status_code,
                status_text=response.reason_phrase,
                response_body=response.text,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TokenExchangeError(
                f"OAuth {action} returned invalid JSON",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from exc
