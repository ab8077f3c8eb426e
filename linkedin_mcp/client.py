"""LinkedIn REST API client.

API docs: https://learn.microsoft.com/linkedin/marketing/community-management/shares/posts-api
Every call carries the Rest.li 2.0 protocol header and a LinkedIn-Version
header (YYYYMM); without them the versioned /rest endpoints reject the call.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from linkedin_mcp.credentials import Credential
from linkedin_mcp.errors import UpstreamError

logger = logging.getLogger(__name__)

API_BASE = "https://api.linkedin.com"
RESTLI_PROTOCOL_VERSION = "2.0.0"

POSTS_PATH = "/rest/posts"
USERINFO_PATH = "/v2/userinfo"
ORGANIZATION_ACLS_PATH = "/v2/organizationAcls"


class BodyKind(str, Enum):
    EMPTY = "empty"
    JSON = "json"
    RAW = "raw"


@dataclass(frozen=True)
class UpstreamResult:
    """A successful LinkedIn response.

    LinkedIn answers creates with an empty body and the new id in a header,
    most reads with JSON, and occasionally with plain text. `kind` says which;
    `data` holds the parsed JSON, the raw text, or None for an empty body.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    kind: BodyKind = BodyKind.EMPTY
    data: Any = None

    def created_id(self) -> str:
        """Id of a newly created entity, from the x-restli-id or location header."""
        return self.headers.get("x-restli-id") or self.headers.get("location") or "created"

    def elements(self) -> list:
        """The `elements` collection of a Rest.li finder response, or []."""
        if self.kind is BodyKind.JSON and isinstance(self.data, dict):
            return self.data.get("elements") or []
        return []

    def payload(self) -> Any:
        """Caller-facing body: parsed JSON, or a marker dict for empty/raw bodies."""
        if self.kind is BodyKind.JSON:
            return self.data
        if self.kind is BodyKind.RAW:
            return {"_raw": self.data}
        return {"_status": self.status, "_headers": self.headers}


def api_headers(token: str, api_version: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "X-Restli-Protocol-Version": RESTLI_PROTOCOL_VERSION,
        "LinkedIn-Version": api_version,
    }


def _decode(response: httpx.Response) -> UpstreamResult:
    headers = {k.lower(): v for k, v in response.headers.items()}
    text = response.text
    if not text:
        return UpstreamResult(status=response.status_code, headers=headers)
    try:
        data = json.loads(text)
    except ValueError:
        return UpstreamResult(status=response.status_code, headers=headers, kind=BodyKind.RAW, data=text)
    return UpstreamResult(status=response.status_code, headers=headers, kind=BodyKind.JSON, data=data)


class LinkedInClient:
    """Issues authenticated calls against the LinkedIn API.

    Holds no credentials: each call receives the Credential it should use, so
    one client instance serves every account. A fresh httpx.AsyncClient is
    opened per call.

    Args:
        api_version: LinkedIn-Version header value (e.g. '202503').
        base_url: API host, overridable for testing.
        timeout: Total per-request timeout in seconds.
        transport: Optional httpx transport (tests inject httpx.MockTransport).
    """

    def __init__(
        self,
        api_version: str,
        base_url: str = API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_version = api_version
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout, connect=10.0)
        self._transport = transport

    async def call(
        self,
        method: str,
        path: str,
        credential: Credential,
        body: dict | None = None,
        params: dict | None = None,
    ) -> UpstreamResult:
        """Send one request and decode the response.

        Args:
            method: HTTP method.
            path: Path below the API host, e.g. '/rest/posts'.
            credential: Credential whose access token authenticates the call.
            body: Optional JSON body.
            params: Optional query parameters.

        Returns:
            UpstreamResult for any 2xx response.

        Raises:
            UpstreamError: For any non-2xx response, with the raw body text.
            httpx.HTTPError: For transport failures and timeouts.
        """
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.request(
                method,
                url,
                headers=api_headers(credential.access_token, self.api_version),
                json=body,
                params=params,
            )

        logger.debug("LinkedIn %s %s -> %d", method, path, response.status_code)
        if not response.is_success:
            raise UpstreamError(response.status_code, response.text)
        return _decode(response)
