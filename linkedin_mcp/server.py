"""
LinkedIn MCP server built on FastMCP v2, with caller authentication.

This module wires together:
- Ten LinkedIn tools (post, post with article, format, validate token,
  profile, list/get/delete posts, list organizations, status), all delegating
  to linkedin_mcp.operations.LinkedInTools
- JWT authentication: every MCP request must carry a valid caller Bearer token
- Scope-based authorization: "linkedin:read" / "linkedin:write" decide which
  tools a caller can see and call (see linkedin_mcp.tools)
- Info, health and readiness HTTP endpoints
- Structured JSON logging
- Streamable HTTP transport at /mcp

Request flow for a tool call:

    caller -> AuthMiddleware (JWT + scope) -> tool function
        -> LinkedInTools handler -> secret store -> LinkedIn API

A handler failure (missing secret, LinkedIn error status, ...) comes back as
an MCP tool result with isError=true and an "Error: ..." message that
includes LinkedIn's status code and raw response body.

Running the server:
    uv run python -m linkedin_mcp.server
"""

import json
import logging
import sys
import uuid
from typing import Annotated, Any, Literal, Sequence

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_request
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import CallToolRequestParams, ListToolsRequest, ToolAnnotations
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from linkedin_mcp.accounts import ACCOUNTS, AccountKey
from linkedin_mcp.auth import AuthError, TokenInfo, validate_token
from linkedin_mcp.client import LinkedInClient
from linkedin_mcp.config import ENV_FILE, settings
from linkedin_mcp.operations import MAX_LIST_COUNT, MAX_POST_CHARS, LinkedInTools, ToolOutcome
from linkedin_mcp.secret_store import SecretStore
from linkedin_mcp.status import collect_secrets, configured_accounts
from linkedin_mcp.tools import SERVER_NAME, SERVER_VERSION, TOOL_SCOPE_MAP, Operation

# ---------------------------------------------------------------------------
# Structured JSON Logging
# ---------------------------------------------------------------------------
# One JSON object per line on stdout, so the platform's log collector can
# index fields such as tool, account, subject and decision.


class JSONLogFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Structured fields passed as logger.info("msg", extra={"log_data": {...}})
    are merged into the top-level object. Example output:

        {"timestamp": "2026-02-06 10:30:00,123", "level": "WARNING",
         "logger": "linkedin_mcp.operations", "message": "Tool call failed",
         "tool": "linkedin_post", "account": "personal", "error": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "log_data"):
            log_entry.update(record.log_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(JSONLogFormatter())

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    handlers=[handler],
)
logger = logging.getLogger("linkedin-mcp")


# ---------------------------------------------------------------------------
# Authentication & Authorization Middleware
# ---------------------------------------------------------------------------
# Enforces two rules on every MCP request:
#
# 1. Authentication: the caller presents a valid JWT
# 2. Authorization: the caller's scopes cover the requested tool
#
# tools/list is filtered so callers only see what they may call; tools/call
# re-checks, so guessing a hidden tool name does not help.


class AuthMiddleware(Middleware):
    """
    JWT authentication and scope-based authorization for LinkedIn tools.

    A read-only caller ("linkedin:read") can inspect accounts and posts but
    cannot publish or delete; publishing needs "linkedin:write".

    Bypassed entirely when settings.require_auth is false.
    """

    def _get_auth_header(self) -> str | None:
        """
        Return the Authorization header of the current HTTP request.

        Returns None if no HTTP request is available (e.g., stdio transport).
        """
        try:
            request = get_http_request()
            return request.headers.get("authorization")
        except RuntimeError:
            return None

    def _authenticate(self, request_id: str) -> TokenInfo:
        """
        Validate the caller token, logging the decision.

        Raises:
            AuthError: If authentication fails for any reason
        """
        try:
            token_info = validate_token(self._get_auth_header())
        except AuthError as e:
            logger.warning(
                "Authentication failed",
                extra={
                    "log_data": {
                        "request_id": request_id,
                        "decision": "rejected",
                        "reason": e.message,
                    }
                },
            )
            raise
        logger.info(
            "Authentication successful",
            extra={
                "log_data": {
                    "request_id": request_id,
                    "subject": token_info.subject,
                    "scopes": token_info.scopes,
                    "decision": "authenticated",
                }
            },
        )
        return token_info

    async def on_list_tools(
        self,
        context: MiddlewareContext[ListToolsRequest],
        call_next: CallNext[ListToolsRequest, Sequence[Tool]],
    ) -> Sequence[Tool]:
        """Return only the tools whose required scope the caller holds."""
        if not settings.require_auth:
            return await call_next(context)

        request_id = str(uuid.uuid4())[:8]
        token_info = self._authenticate(request_id)
        all_tools = await call_next(context)

        authorized_tools = [tool for tool in all_tools if token_info.may_call(tool.name)]

        logger.info(
            "Tool list filtered by scope",
            extra={
                "log_data": {
                    "request_id": request_id,
                    "subject": token_info.subject,
                    "scopes": token_info.scopes,
                    "total_tools": len(all_tools),
                    "authorized_tools": [t.name for t in authorized_tools],
                    "decision": "filtered",
                }
            },
        )
        return authorized_tools

    async def on_call_tool(
        self,
        context: MiddlewareContext[CallToolRequestParams],
        call_next: CallNext[CallToolRequestParams, ToolResult],
    ) -> ToolResult:
        """
        Allow a tools/call only if the caller holds the tool's scope.

        Tools without a scope mapping are denied (fail closed). A denial is
        raised as PermissionError, which FastMCP returns as an error result.
        """
        if not settings.require_auth:
            return await call_next(context)

        request_id = str(uuid.uuid4())[:8]
        tool_name = context.message.name
        token_info = self._authenticate(request_id)

        required_scope = TOOL_SCOPE_MAP.get(tool_name)
        if required_scope is None:
            logger.warning(
                "Tool call denied: no scope mapping found",
                extra={
                    "log_data": {
                        "request_id": request_id,
                        "subject": token_info.subject,
                        "tool": tool_name,
                        "decision": "denied",
                        "reason": "no_scope_mapping",
                    }
                },
            )
            raise PermissionError(f"Access denied: tool '{tool_name}' has no scope mapping")

        if required_scope not in token_info.scopes:
            logger.warning(
                "Tool call denied: insufficient scope",
                extra={
                    "log_data": {
                        "request_id": request_id,
                        "subject": token_info.subject,
                        "tool": tool_name,
                        "required_scope": required_scope,
                        "token_scopes": token_info.scopes,
                        "decision": "denied",
                        "reason": "insufficient_scope",
                    }
                },
            )
            raise PermissionError(
                f"Access denied: tool '{tool_name}' requires scope '{required_scope}'"
            )

        logger.info(
            "Tool call authorized",
            extra={
                "log_data": {
                    "request_id": request_id,
                    "subject": token_info.subject,
                    "tool": tool_name,
                    "required_scope": required_scope,
                    "decision": "allowed",
                }
            },
        )
        return await call_next(context)


# ---------------------------------------------------------------------------
# Server and handlers
# ---------------------------------------------------------------------------
mcp = FastMCP(
    name=SERVER_NAME,
    instructions=(
        "Format and publish LinkedIn posts for a personal profile and two "
        "company pages (MobiCycle, MobiCycle Productions). Pick the page with "
        "the 'account' argument; it defaults to the personal profile. Use "
        "linkedin_status to see which accounts have tokens configured."
    ),
    middleware=[AuthMiddleware()],
)

linkedin = LinkedInTools(
    secrets=SecretStore(env_file=ENV_FILE),
    client=LinkedInClient(
        api_version=settings.api_version,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
    ),
    storage_label=settings.storage_label,
)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
PUBLISH = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=True)
OFFLINE = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)

AccountArg = Annotated[AccountKey, Field(description="Which account to act as")]
ContentArg = Annotated[str, Field(max_length=MAX_POST_CHARS, description="Post text (max 3000 chars)")]
VisibilityArg = Annotated[Literal["PUBLIC", "CONNECTIONS"], Field(description="Post visibility")]
PostIdArg = Annotated[str, Field(min_length=1, description="The post URN (e.g. urn:li:share:1234)")]


def _respond(outcome: ToolOutcome) -> Any:
    """Return a successful outcome's data; raise ToolError for a failed one."""
    if outcome.is_error:
        raise ToolError(outcome.render())
    return outcome.data


@mcp.tool(description="Create a LinkedIn text post. Defaults to personal account.", annotations=PUBLISH)
async def linkedin_post(
    content: ContentArg,
    account: AccountArg = AccountKey.PERSONAL,
    visibility: VisibilityArg = "PUBLIC",
) -> dict:
    return _respond(await linkedin.post(content=content, account=account, visibility=visibility))


@mcp.tool(description="Create a LinkedIn post with an article link (URL card preview)", annotations=PUBLISH)
async def linkedin_post_article(
    content: ContentArg,
    article_url: Annotated[str, Field(description="URL of the article to share")],
    article_title: Annotated[str | None, Field(description="Custom title for the article card")] = None,
    article_description: Annotated[
        str | None, Field(description="Custom description for the article card")
    ] = None,
    account: AccountArg = AccountKey.PERSONAL,
    visibility: VisibilityArg = "PUBLIC",
) -> dict:
    return _respond(
        await linkedin.post_article(
            content=content,
            article_url=article_url,
            article_title=article_title,
            article_description=article_description,
            account=account,
            visibility=visibility,
        )
    )


@mcp.tool(description="Format text into a structured LinkedIn post with visual hierarchy", annotations=OFFLINE)
async def linkedin_format_post(
    title: Annotated[str, Field(description="Main headline")],
    content: Annotated[str, Field(description="Main body content")],
    hashtags: Annotated[str | None, Field(description="Hashtags to append")] = None,
    cta: Annotated[str | None, Field(description="Call-to-action text")] = None,
) -> dict:
    return _respond(await linkedin.format_post(title=title, content=content, hashtags=hashtags, cta=cta))


@mcp.tool(description="Check if an access token is valid and show expiry info", annotations=READ_ONLY)
async def linkedin_validate_token(account: AccountArg = AccountKey.PERSONAL) -> dict:
    return _respond(await linkedin.validate_token(account=account))


@mcp.tool(description="Get LinkedIn profile info for the authenticated user", annotations=READ_ONLY)
async def linkedin_get_profile(account: AccountArg = AccountKey.PERSONAL) -> Any:
    return _respond(await linkedin.get_profile(account=account))


@mcp.tool(description="List recent posts from a LinkedIn account with metadata", annotations=READ_ONLY)
async def linkedin_list_posts(
    account: AccountArg = AccountKey.PERSONAL,
    count: Annotated[int, Field(ge=1, le=MAX_LIST_COUNT, description="How many posts to retrieve")] = 10,
) -> dict:
    return _respond(await linkedin.list_posts(account=account, count=count))


@mcp.tool(description="Get a single LinkedIn post by its URN with full details", annotations=READ_ONLY)
async def linkedin_get_post(post_id: PostIdArg, account: AccountArg = AccountKey.PERSONAL) -> Any:
    return _respond(await linkedin.get_post(post_id=post_id, account=account))


@mcp.tool(description="Delete a LinkedIn post by its URN", annotations=DESTRUCTIVE)
async def linkedin_delete_post(post_id: PostIdArg, account: AccountArg = AccountKey.PERSONAL) -> dict:
    return _respond(await linkedin.delete_post(post_id=post_id, account=account))


@mcp.tool(
    description="List companies/organizations you can manage and post on behalf of",
    annotations=READ_ONLY,
)
async def linkedin_list_organizations(account: AccountArg = AccountKey.PERSONAL) -> dict:
    return _respond(await linkedin.list_organizations(account=account))


@mcp.tool(description="Show server configuration and account token status", annotations=OFFLINE)
async def linkedin_status() -> dict:
    return _respond(await linkedin.status())


# ---------------------------------------------------------------------------
# Info, Health and Readiness Endpoints
# ---------------------------------------------------------------------------
# Plain HTTP endpoints (not MCP protocol) for load balancers and probes. They
# do not require a caller token and never touch LinkedIn.


def server_info() -> dict:
    return {
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "status": "healthy",
        "mcp_endpoint": "/mcp",
        "storage": settings.storage_label,
        "tools": [op.value for op in Operation],
        "accounts": [key.value for key in ACCOUNTS],
    }


@mcp.custom_route("/", methods=["GET"])
async def index(request: Request) -> Response:
    """Static description of the server."""
    return JSONResponse(server_info())


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> Response:
    """Liveness probe: is the server process alive and responsive?"""
    return JSONResponse(server_info())


@mcp.custom_route("/ready", methods=["GET"])
async def readiness_check(request: Request) -> Response:
    """Readiness probe: is at least one LinkedIn account token configured?"""
    configured = configured_accounts(await collect_secrets(linkedin.secrets))
    if not configured:
        return JSONResponse(
            {"status": "not_ready", "reason": "no account tokens configured"},
            status_code=503,
        )
    return JSONResponse({"status": "ready", "accounts": configured})


# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logger.info(
        "Starting LinkedIn MCP server on %s:%d (transport=streamable-http, auth=%s, api_version=%s)",
        settings.host,
        settings.port,
        "enabled" if settings.require_auth else "disabled",
        settings.api_version,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
