"""
Caller authentication for the MCP endpoint.

Two different tokens are involved in every tool call, and this module only
deals with the first:

1. The caller's JWT, sent in the Authorization header of the MCP request.
   It says who is calling and which tool scopes ("linkedin:read",
   "linkedin:write") they hold. Validated here.
2. The LinkedIn access token for the selected account, read from the secret
   store by linkedin_mcp.credentials and sent upstream. Never seen here.

Caller token payload:
    {
        "sub": "content-agent",                          # who is calling
        "scope": ["linkedin:read", "linkedin:write"],    # which tools they may use
        "exp": 1738800000                                # expiry (Unix timestamp)
    }

Tokens are signed with HS256 using MCP_JWT_SECRET_KEY; scripts/generate_token.py
mints them.
"""

from dataclasses import dataclass

import jwt

from linkedin_mcp.config import settings
from linkedin_mcp.tools import TOOL_SCOPE_MAP


class AuthError(Exception):
    """
    Raised when a caller token is rejected for any reason.

    One type covers every failure (missing header, bad scheme, bad signature,
    expired, malformed claims). The detailed reason is logged server-side.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code to return (401 for auth failures)
    """

    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class TokenInfo:
    """
    Validated caller identity.

    Attributes:
        subject: The "sub" claim, e.g. "content-agent"
        scopes: Tool scopes granted, e.g. ["linkedin:read"]
    """

    subject: str
    scopes: list[str]

    def may_call(self, tool_name: str) -> bool:
        """True if the tool is mapped to a scope this caller holds."""
        required = TOOL_SCOPE_MAP.get(tool_name)
        return required is not None and required in self.scopes


def validate_token(authorization_header: str | None) -> TokenInfo:
    """
    Validate a caller's "Bearer <jwt>" Authorization header.

    Steps: header present, Bearer scheme, signature and expiry (exp and sub
    are required claims), then the scope claim must be a list of strings.
    A missing scope claim means no scopes.

    Raises:
        AuthError: If any step fails
    """
    if not authorization_header:
        raise AuthError("Missing Authorization header")

    try:
        payload = jwt.decode(
            _bearer_token(authorization_header),
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {e}")

    scopes_claim = payload.get("scope", [])
    if not isinstance(scopes_claim, list):
        raise AuthError("Invalid scope claim: must be a list")
    if not all(isinstance(s, str) for s in scopes_claim):
        raise AuthError("Invalid scope claim: all entries must be strings")

    return TokenInfo(subject=payload.get("sub", ""), scopes=scopes_claim)


def _bearer_token(authorization_header: str) -> str:
    # RFC 6750: the scheme is case-insensitive
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Invalid Authorization header format, expected 'Bearer <token>'")
    return token
