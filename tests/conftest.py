"""
Pytest configuration and fixtures for BCConnector tests
"""

import json
import urllib.parse
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from bcconnector.auth import IAuthorizationCodeSource, ITokenProvider
from bcconnector.config import Settings
from bcconnector.storage import InMemorySecureStore

TENANT_ID = "72f988bf-86f1-41af-91ab-2d7cd011db47"
COMPANY_ID = "6b8a3c2e-1f4d-4e7a-9c5b-0d2e8f7a1b3c"
API_BASE = f"https://api.businesscentral.dynamics.com/v2.0/{TENANT_ID}/Sandbox/api/v2.0"
TOKEN_URL = f"https://login.microsoftonline.com/{TENANT_ID}/oauth2/v2.0/token"
T0 = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock for token expiry tests"""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class Recorder:
    """MockTransport handler that records every request it serves"""

    def __init__(self, handler: Callable[[httpx.Request], Any]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    def form(self, index: int) -> Dict[str, str]:
        return dict(urllib.parse.parse_qsl(self.requests[index].content.decode()))

    @property
    def grant_types(self) -> List[str]:
        return [
            dict(urllib.parse.parse_qsl(r.content.decode())).get("grant_type", "")
            for r in self.requests
            if str(r.url) == TOKEN_URL
        ]


class EchoCodeSource(IAuthorizationCodeSource):
    """Completes the browser step by echoing the state of the authorize URL"""

    def __init__(self, code: str = "auth-code", state_override: Optional[str] = None):
        self.code = code
        self.state_override = state_override
        self.calls = 0

    async def request_code(self, authorization_url: str) -> str:
        self.calls += 1
        query = urllib.parse.parse_qs(urllib.parse.urlparse(authorization_url).query)
        state = self.state_override or query["state"][0]
        return f"http://localhost/?code={self.code}&state={state}"


class FakeTokenProvider(ITokenProvider):
    """Hands out a fixed token, or raises a configured error"""

    def __init__(self, token: str = "token-1", error: Optional[Exception] = None):
        self.token = token
        self.error = error
        self.calls = 0

    async def get_access_token(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.token

    @property
    def is_authenticated(self) -> bool:
        return self.error is None


class MemoryKeyring(KeyringBackend):
    """keyring backend kept in a dict; fail_on names a key whose writes fail"""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords: Dict[Tuple[str, str], str] = {}
        self.fail_on: Optional[str] = None

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self.passwords.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        if username == self.fail_on:
            raise KeyringError("keychain is locked")
        self.passwords[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


def token_response(
    access_token: str = "access-1",
    refresh_token: Optional[str] = "refresh-1",
    expires_in: int = 3600,
    status_code: int = 200,
) -> httpx.Response:
    body: Dict[str, Any] = {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": expires_in,
    }
    if refresh_token is not None:
        body["refresh_token"] = refresh_token
    return httpx.Response(status_code, json=body)


def oauth_error(status_code: int = 400, error: str = "invalid_grant") -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"error": error, "error_description": f"AADSTS70000: {error}"},
    )


def collection(items: List[Dict[str, Any]], next_link: Optional[str] = None) -> httpx.Response:
    body: Dict[str, Any] = {"@odata.context": f"{API_BASE}/$metadata#customers", "value": items}
    if next_link:
        body["@odata.nextLink"] = next_link
    return httpx.Response(200, content=json.dumps(body).encode())


@pytest.fixture
def settings():
    """Settings for a sandbox tenant with an in-memory secure store"""
    return Settings(
        azure_tenant_id=TENANT_ID,
        azure_client_id="11111111-2222-3333-4444-555555555555",
        redirect_uri="ca.bcconnector.auth://oauth2redirect",
        bc_environment="Sandbox",
        bc_company_id=COMPANY_ID,
        bc_company_name="CRONUS USA, Inc.",
        secure_store="memory",
        secure_store_path=":memory:",
        request_timeout=5.0,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def secure_store():
    return InMemorySecureStore()


@pytest.fixture
async def make_http_client():
    """Build AsyncClients over MockTransport and close them after the test"""
    clients: List[httpx.AsyncClient] = []

    def _make(recorder: Recorder) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def memory_keyring():
    """Install a dict-backed keyring backend for the duration of a test"""
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)
