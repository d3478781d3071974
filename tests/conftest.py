"""Test configuration and fixtures."""

import os
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Set test environment variables BEFORE importing settings
os.environ["ENVIRONMENT"] = "test"

from linear_mcp.auth.credentials import CredentialManager, StaticKey
from linear_mcp.session import LinearSession
from linear_mcp.upstream.facade import LinearQueryFacade


class FakeTransport:
    """Records every ``raw_request`` and replays queued responses.

    Queue items are either a ``data`` dict (wrapped as ``{"data": ...}``) or an
    exception instance, which is raised instead.
    """

    def __init__(self, *responses: Any):
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []
        self._responses = list(responses)

    def queue(self, *responses: Any) -> "FakeTransport":
        self._responses.extend(responses)
        return self

    async def raw_request(self, document: str, variables: Optional[Dict[str, Any]] = None):
        self.calls.append((document, variables))
        if not self._responses:
            raise AssertionError(f"Unexpected upstream call: {document.split('{')[0].strip()}")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return {"data": response}

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_variables(self) -> Optional[Dict[str, Any]]:
        return self.calls[-1][1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def auth():
    """Credential manager authenticated with a static API key."""
    manager = CredentialManager()
    manager.initialize(StaticKey("lin_api_test"))
    return manager


@pytest.fixture
def facade_factory(transport):
    """Facade factory that ignores the real transport and uses the fake one."""
    return lambda _real: LinearQueryFacade(transport)


@pytest.fixture
def session(auth, facade_factory):
    return LinearSession(auth, facade_factory)


def result_text(result) -> str:
    return result.content[0].text
