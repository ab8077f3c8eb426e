"""
Shared test fixtures for the LinkedIn MCP server test suite.

Key fixtures:
- make_token / make_auth_header: mint caller JWTs with any claims
- linkedin_api: an in-memory stand-in for the LinkedIn REST API, served
  through httpx.MockTransport, that records every request it receives
- make_tools: builds a LinkedInTools bound to a given set of account
  secrets and to linkedin_api

Testing approach:
- test_accounts.py, test_credentials.py, test_client.py, test_status.py:
  unit tests for the catalog, secret parsing, HTTP client and status report
- test_operations.py: each tool handler against the fake LinkedIn API
- test_auth.py: caller token validation
- test_tools.py: the full MCP server over its ASGI app (in-memory, no network)
"""

import datetime

import httpx
import jwt
import pytest

from linkedin_mcp.client import LinkedInClient
from linkedin_mcp.config import settings
from linkedin_mcp.operations import LinkedInTools
from linkedin_mcp.secret_store import SecretStore

# Must match settings.jwt_secret_key so generated tokens are accepted.
TEST_SECRET = settings.jwt_secret_key
TEST_ALGORITHM = settings.jwt_algorithm


# ---------------------------------------------------------------------------
# Caller token factories
# ---------------------------------------------------------------------------
@pytest.fixture
def make_token():
    """
    Factory fixture to generate caller JWTs.

    Usage in tests:
        def test_something(make_token):
            token = make_token(sub="agent", scopes=["linkedin:read"])
    """

    def _make_token(
        sub: str = "test-agent",
        scopes: list[str] | None = None,
        secret: str = TEST_SECRET,
        algorithm: str = TEST_ALGORITHM,
        exp_hours: float = 1.0,
        extra_claims: dict | None = None,
        include_exp: bool = True,
        include_sub: bool = True,
    ) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        payload: dict = {"iat": now}

        if include_sub:
            payload["sub"] = sub
        if scopes is not None:
            payload["scope"] = scopes
        if include_exp:
            payload["exp"] = now + datetime.timedelta(hours=exp_hours)
        if extra_claims:
            payload.update(extra_claims)

        return jwt.encode(payload, secret, algorithm=algorithm)

    return _make_token


@pytest.fixture
def make_auth_header(make_token):
    """Same as make_token, but returns a full "Bearer <token>" header value."""

    def _make_auth_header(**kwargs) -> str:
        return f"Bearer {make_token(**kwargs)}"

    return _make_auth_header


# ---------------------------------------------------------------------------
# Fake LinkedIn API
# ---------------------------------------------------------------------------
class FakeLinkedIn:
    """
    Minimal LinkedIn double for httpx.MockTransport.

    Register canned responses per (method, path) with respond(); anything
    unregistered gets a 404. Every request is kept in `requests`.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.requests: list[httpx.Request] = []

    def respond(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body=None,
        text: str = "",
        headers: dict | None = None,
    ) -> None:
        if json_body is not None:
            response = httpx.Response(status, json=json_body, headers=headers)
        else:
            response = httpx.Response(status, text=text, headers=headers)
        self.routes[(method, path)] = response

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        canned = self.routes.get((request.method, request.url.path))
        if canned is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(canned.status_code, content=canned.content, headers=canned.headers)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def linkedin_api() -> FakeLinkedIn:
    return FakeLinkedIn()


@pytest.fixture
def linkedin_client(linkedin_api) -> LinkedInClient:
    return LinkedInClient(api_version="202503", transport=httpx.MockTransport(linkedin_api.handle))


@pytest.fixture
def make_tools(linkedin_client):
    """
    Factory fixture for LinkedInTools with the given account secrets.

    Usage in tests:
        tools = make_tools(LINKEDIN_TOKEN_PERSONAL="abc123")
    """

    def _make_tools(**secrets: str) -> LinkedInTools:
        return LinkedInTools(secrets=SecretStore(secrets), client=linkedin_client)

    return _make_tools
