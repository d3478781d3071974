"""Tests for CredentialManager (static keys, OAuth code exchange, refresh).

The token endpoint is reached through the shared HTTP client, which
CredentialManager imports lazily, so it is patched at its source module:
  - linear_mcp.http_client.get_http_client
"""

import urllib.parse
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from linear_mcp.auth.credentials import (
    MAX_PENDING_STATES,
    NEVER_EXPIRES,
    CredentialManager,
    OAuthCredential,
    StaticKey,
    TokenState,
)
from linear_mcp.exceptions import (
    InvalidConfigError,
    InvalidParamsError,
    NotAuthenticatedError,
    NotInitializedError,
    TokenExchangeError,
    TransportError,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _token_response(json_data=None, status_code=200, reason="OK", text=""):
    """Build a mock httpx.Response-like object for the token endpoint."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.reason_phrase = reason
    resp.text = text
    resp.json.return_value = json_data
    return resp


class _Clock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


def _oauth_manager(clock=None):
    manager = CredentialManager(clock=clock or _Clock())
    manager.initialize(OAuthCredential("client-1", "secret-1", "http://localhost/callback"))
    return manager


def _state_of(url):
    return dict(urllib.parse.parse_qsl(urllib.parse.urlparse(url).query))["state"]


def _mock_http(mock_get_client, *responses):
    mock_client = AsyncMock()
    mock_client.post.side_effect = list(responses)
    mock_get_client.return_value = mock_client
    return mock_client


# ---------------------------------------------------------------------------
# initialize
# ---------------------------------------------------------------------------

class TestInitialize:
    """Tests for CredentialManager.initialize()."""

    def test_static_key_is_immediately_authenticated(self):
        manager = CredentialManager()
        manager.initialize(StaticKey("lin_api_abc"))

        assert manager.is_authenticated()
        assert not manager.is_oauth
        assert manager.token_state.expires_at == NEVER_EXPIRES
        assert not manager.needs_refresh()

    def test_static_key_sent_without_bearer_prefix(self):
        manager = CredentialManager()
        manager.initialize(StaticKey("lin_api_abc"))

        transport = manager.current_transport()
        assert transport.auth_header == "Authorization"
        assert transport.auth_value == "lin_api_abc"

    def test_empty_static_key_rejected(self):
        manager = CredentialManager()
        with pytest.raises(InvalidConfigError):
            manager.initialize(StaticKey(""))
        assert not manager.is_authenticated()

    def test_oauth_missing_fields_listed(self):
        manager = CredentialManager()
        with pytest.raises(InvalidConfigError) as exc_info:
            manager.initialize(OAuthCredential("client-1", "", ""))

        assert "client_secret" in str(exc_info.value)
        assert "redirect_uri" in str(exc_info.value)
        assert manager.credential is None

    def test_oauth_not_authenticated_until_exchange(self):
        manager = _oauth_manager()

        assert manager.is_oauth
        assert not manager.is_authenticated()
        with pytest.raises(NotAuthenticatedError):
            manager.current_transport()

    def test_reinitialize_replaces_previous_state(self):
        manager = CredentialManager()
        manager.initialize(StaticKey("lin_api_abc"))
        manager.initialize(OAuthCredential("client-1", "secret-1", "http://localhost/cb"))

        assert not manager.is_authenticated()
        assert manager.token_state is None

    def test_repr_masks_secrets(self):
        assert "lin_api_abc" not in repr(StaticKey("lin_api_abc"))
        assert "secret-1" not in repr(OAuthCredential("client-1", "secret-1", "http://x"))


# ---------------------------------------------------------------------------
# build_authorization_url
# ---------------------------------------------------------------------------

class TestAuthorizationUrl:
    """Tests for CredentialManager.build_authorization_url()."""

    def test_requires_oauth(self):
        manager = CredentialManager()
        manager.initialize(StaticKey("lin_api_abc"))

        with pytest.raises(NotInitializedError):
            manager.build_authorization_url()

    def test_url_parameters(self):
        manager = _oauth_manager()

        url = manager.build_authorization_url()
        parsed = urllib.parse.urlparse(url)
        params = dict(urllib.parse.parse_qsl(parsed.query))

        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://linear.app/oauth/authorize"
        assert params["client_id"] == "client-1"
        assert params["redirect_uri"] == "http://localhost/callback"
        assert params["response_type"] == "code"
        assert params["scope"] == "read,write,issues:create,offline_access"
        assert params["actor"] == "application"
        assert params["access_type"] == "offline"
        assert params["state"]

    def test_each_url_gets_a_fresh_state(self):
        manager = _oauth_manager()

        first = dict(urllib.parse.parse_qsl(urllib.parse.urlparse(manager.build_authorization_url()).query))
        second = dict(urllib.parse.parse_qsl(urllib.parse.urlparse(manager.build_authorization_url()).query))

        assert first["state"] != second["state"]

    @patch("linear_mcp.http_client.get_http_client")
    async def test_only_recent_states_kept(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response({"access_token": "at-1", "refresh_token": "rt-1", "expires_in": 3600}),
        )
        manager = _oauth_manager()
        states = [_state_of(manager.build_authorization_url()) for _ in range(MAX_PENDING_STATES + 1)]

        with pytest.raises(InvalidParamsError):
            await manager.exchange_code("code-123", state=states[0])

        await manager.exchange_code("code-123", state=states[-1])
        assert manager.is_authenticated()


# ---------------------------------------------------------------------------
# exchange_code
# ---------------------------------------------------------------------------

class TestExchangeCode:
    """Tests for CredentialManager.exchange_code()."""

    @patch("linear_mcp.http_client.get_http_client")
    async def test_success_installs_bearer_transport(self, mock_get_client):
        mock_client = _mock_http(
            mock_get_client,
            _token_response({"access_token": "at-1", "refresh_token": "rt-1", "expires_in": 3600}),
        )
        manager = _oauth_manager()

        token_state = await manager.exchange_code("code-123")

        assert token_state.access_key == "at-1"
        assert token_state.refresh_token == "rt-1"
        assert token_state.expires_at == T0 + timedelta(seconds=3600)
        assert manager.is_authenticated()
        assert manager.current_transport().auth_value == "Bearer at-1"

        call = mock_client.post.call_args
        assert call.args[0] == "https://api.linear.app/oauth/token"
        form = call.kwargs["data"]
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "code-123"
        assert form["client_secret"] == "secret-1"
        assert form["redirect_uri"] == "http://localhost/callback"
        assert call.kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"

    @patch("linear_mcp.http_client.get_http_client")
    async def test_issued_state_accepted_once(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response({"access_token": "at-1", "refresh_token": "rt-1", "expires_in": 3600}),
        )
        manager = _oauth_manager()
        state = _state_of(manager.build_authorization_url())

        await manager.exchange_code("code-123", state=state)

        with pytest.raises(InvalidParamsError):
            await manager.exchange_code("code-456", state=state)

    @patch("linear_mcp.http_client.get_http_client")
    async def test_state_survives_failed_exchange(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response(status_code=400, reason="Bad Request", text='{"error":"invalid_grant"}'),
            _token_response({"access_token": "at-1", "refresh_token": "rt-1", "expires_in": 3600}),
        )
        manager = _oauth_manager()
        state = _state_of(manager.build_authorization_url())

        with pytest.raises(TokenExchangeError):
            await manager.exchange_code("stale-code", state=state)

        token_state = await manager.exchange_code("code-123", state=state)

        assert token_state.access_key == "at-1"
        with pytest.raises(InvalidParamsError):
            await manager.exchange_code("code-456", state=state)

    @patch("linear_mcp.http_client.get_http_client")
    async def test_foreign_state_rejected_before_network(self, mock_get_client):
        mock_client = _mock_http(mock_get_client)
        manager = _oauth_manager()
        manager.build_authorization_url()

        with pytest.raises(InvalidParamsError) as exc_info:
            await manager.exchange_code("code-123", state="forged")

        assert exc_info.value.fields == ["state"]
        mock_client.post.assert_not_called()

    async def test_requires_oauth_credential(self):
        manager = CredentialManager()

        with pytest.raises(NotInitializedError):
            await manager.exchange_code("code-123")

    @patch("linear_mcp.http_client.get_http_client")
    async def test_rejected_exchange_keeps_previous_token(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response(
                status_code=400, reason="Bad Request", text='{"error":"invalid_grant"}'
            ),
        )
        manager = _oauth_manager()
        previous = TokenState("at-0", "rt-0", T0 + timedelta(hours=1))
        manager.set_token_state(previous)

        with pytest.raises(TokenExchangeError) as exc_info:
            await manager.exchange_code("bad-code")

        assert exc_info.value.status_code == 400
        assert exc_info.value.status_text == "Bad Request"
        assert "invalid_grant" in exc_info.value.response_body
        assert manager.token_state is previous
        assert manager.current_transport().auth_value == "Bearer at-0"

    @patch("linear_mcp.http_client.get_http_client")
    async def test_rejected_first_exchange_stays_unauthenticated(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response(status_code=401, reason="Unauthorized", text='{"error":"invalid_client"}'),
        )
        manager = _oauth_manager()

        with pytest.raises(TokenExchangeError) as exc_info:
            await manager.exchange_code("code-123")

        assert exc_info.value.status_code == 401
        assert manager.token_state is None
        assert not manager.is_authenticated()
        assert not manager.needs_refresh()
        with pytest.raises(NotAuthenticatedError):
            manager.current_transport()

    @patch("linear_mcp.http_client.get_http_client")
    async def test_missing_access_token(self, mock_get_client):
        _mock_http(mock_get_client, _token_response({"token_type": "Bearer"}))
        manager = _oauth_manager()

        with pytest.raises(TokenExchangeError, match="No access token"):
            await manager.exchange_code("code-123")
        assert not manager.is_authenticated()

    @patch("linear_mcp.http_client.get_http_client")
    async def test_network_error_becomes_transport_error(self, mock_get_client):
        _mock_http(mock_get_client, httpx.ConnectError("connection refused"))
        manager = _oauth_manager()

        with pytest.raises(TransportError) as exc_info:
            await manager.exchange_code("code-123")

        assert exc_info.value.operation == "OAuth code exchange"
        assert "connection refused" in str(exc_info.value)


# ---------------------------------------------------------------------------
# refresh / needs_refresh
# ---------------------------------------------------------------------------

class TestRefresh:
    """Tests for CredentialManager.refresh() and needs_refresh()."""

    async def test_refresh_requires_refresh_token(self):
        manager = _oauth_manager()

        with pytest.raises(NotInitializedError):
            await manager.refresh()

    async def test_refresh_not_available_for_static_key(self):
        manager = CredentialManager()
        manager.initialize(StaticKey("lin_api_abc"))

        with pytest.raises(NotInitializedError):
            await manager.refresh()

    @patch("linear_mcp.http_client.get_http_client")
    async def test_refresh_keeps_old_refresh_token_when_omitted(self, mock_get_client):
        mock_client = _mock_http(
            mock_get_client, _token_response({"access_token": "at-2", "expires_in": 7200})
        )
        manager = _oauth_manager()
        manager.set_token_state(TokenState("at-1", "rt-1", T0 + timedelta(minutes=1)))

        token_state = await manager.refresh()

        assert token_state.access_key == "at-2"
        assert token_state.refresh_token == "rt-1"
        assert manager.current_transport().auth_value == "Bearer at-2"
        form = mock_client.post.call_args.kwargs["data"]
        assert form["grant_type"] == "refresh_token"
        assert form["refresh_token"] == "rt-1"

    @patch("linear_mcp.http_client.get_http_client")
    async def test_refresh_uses_rotated_refresh_token(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response({"access_token": "at-2", "refresh_token": "rt-2", "expires_in": 60}),
        )
        manager = _oauth_manager()
        manager.set_token_state(TokenState("at-1", "rt-1", T0))

        token_state = await manager.refresh()

        assert token_state.refresh_token == "rt-2"

    @patch("linear_mcp.http_client.get_http_client")
    async def test_in_flight_transport_survives_refresh(self, mock_get_client):
        _mock_http(mock_get_client, _token_response({"access_token": "at-2", "expires_in": 60}))
        manager = _oauth_manager()
        manager.set_token_state(TokenState("at-1", "rt-1", T0))
        captured = manager.current_transport()

        await manager.refresh()

        assert captured.auth_value == "Bearer at-1"
        assert manager.current_transport() is not captured

    def test_needs_refresh_inside_margin(self):
        clock = _Clock()
        manager = _oauth_manager(clock)
        manager.set_token_state(TokenState("at-1", "rt-1", T0 + timedelta(hours=1)))

        assert not manager.needs_refresh()

        clock.now = T0 + timedelta(minutes=54)
        assert not manager.needs_refresh()

        clock.now = T0 + timedelta(minutes=55)
        assert manager.needs_refresh()

    @patch("linear_mcp.http_client.get_http_client")
    async def test_needs_refresh_after_code_exchange(self, mock_get_client):
        _mock_http(
            mock_get_client,
            _token_response({"access_token": "at-1", "refresh_token": "rt-1", "expires_in": 3600}),
        )
        clock = _Clock()
        manager = _oauth_manager(clock)

        await manager.exchange_code("code-123")

        assert not manager.needs_refresh()

        clock.now = T0 + timedelta(minutes=54, seconds=59)
        assert not manager.needs_refresh()

        clock.now = T0 + timedelta(minutes=55)
        assert manager.needs_refresh()

    def test_needs_refresh_false_without_token(self):
        assert not _oauth_manager().needs_refresh()
