"""
LinkedIn tool handlers.

Each handler is one pipeline:

    check arguments -> look up account -> resolve credential
        -> one LinkedIn call (none for format/status) -> shape the result

Handlers never raise. Whatever goes wrong (unknown account, missing secret,
bad arguments, a LinkedIn error status, a network timeout) is logged and
returned as a ToolOutcome carrying the error message, which the server turns
into an MCP error result. Nothing is retried; a create or delete that failed
is simply reported.

Credentials are resolved from the secret store on every call and never kept
on the instance.
"""

import functools
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from pydantic import HttpUrl, TypeAdapter, ValidationError

from linkedin_mcp.accounts import Account, AccountKey, lookup
from linkedin_mcp.client import (
    ORGANIZATION_ACLS_PATH,
    POSTS_PATH,
    USERINFO_PATH,
    LinkedInClient,
)
from linkedin_mcp.credentials import Credential, format_timestamp, resolve
from linkedin_mcp.errors import MalformedInput
from linkedin_mcp.secret_store import SecretStore
from linkedin_mcp.status import collect_secrets, summarize
from linkedin_mcp.tools import SERVER_NAME, SERVER_VERSION, Operation

logger = logging.getLogger(__name__)

MAX_POST_CHARS = 3000
PREVIEW_CHARS = 300
MIN_LIST_COUNT = 1
MAX_LIST_COUNT = 50
VISIBILITIES = ("PUBLIC", "CONNECTIONS")

_HTTP_URL = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class ToolOutcome:
    """
    Result of one tool call: either `data` (success) or `error` (failure).

    Attributes:
        data: JSON-serializable success payload
        error: Human-readable failure message
    """

    data: Any = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def render(self) -> str:
        if self.is_error:
            return f"Error: {self.error}"
        return json.dumps(self.data, indent=2)


def handler(operation: Operation):
    """Run a handler and convert any exception into a failed ToolOutcome."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, **kwargs) -> ToolOutcome:
            try:
                data = await func(self, **kwargs)
            except Exception as e:
                message = str(e) or type(e).__name__
                account = kwargs.get("account", "")
                logger.warning(
                    "Tool call failed",
                    extra={
                        "log_data": {
                            "tool": operation.value,
                            "account": getattr(account, "value", account),
                            "error_type": type(e).__name__,
                            "error": message,
                        }
                    },
                )
                return ToolOutcome(error=message)
            return ToolOutcome(data=data)

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------
# Same bounds as the MCP input schemas, for direct callers of LinkedInTools.


def _check_content(content: str) -> None:
    if not isinstance(content, str):
        raise MalformedInput("content must be a string")
    if len(content) > MAX_POST_CHARS:
        raise MalformedInput(
            f"content is {len(content)} characters; the limit is {MAX_POST_CHARS}"
        )


def _check_visibility(visibility: str) -> None:
    if visibility not in VISIBILITIES:
        raise MalformedInput(
            f"visibility must be one of {', '.join(VISIBILITIES)}, got {visibility!r}"
        )


def _check_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise MalformedInput(f"count must be an integer, got {count!r}")
    if not MIN_LIST_COUNT <= count <= MAX_LIST_COUNT:
        raise MalformedInput(
            f"count must be between {MIN_LIST_COUNT} and {MAX_LIST_COUNT}, got {count}"
        )


def _check_url(url: str) -> None:
    try:
        _HTTP_URL.validate_python(url)
    except ValidationError:
        raise MalformedInput(f"article_url is not a valid URL: {url!r}")


def _check_post_id(post_id: str) -> None:
    if not isinstance(post_id, str) or not post_id.strip():
        raise MalformedInput("post_id must be a non-empty post URN")


def _post_path(post_id: str) -> str:
    return f"{POSTS_PATH}/{quote(post_id, safe='')}"


def _post_envelope(account: Account, content: str, visibility: str) -> dict[str, Any]:
    return {
        "author": account.author_urn,
        "commentary": content,
        "visibility": visibility,
        "distribution": {
            "feedDistribution": "MAIN_FEED",
            "targetEntities": [],
            "thirdPartyDistributionChannels": [],
        },
        "lifecycleState": "PUBLISHED",
        "isReshareDisabledByAuthor": False,
    }


def _created_at(value) -> str | None:
    # LinkedIn reports createdAt in epoch milliseconds
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return None
    return format_timestamp(datetime.fromtimestamp(value / 1000, tz=timezone.utc))


def _shape_post(post: dict) -> dict[str, Any]:
    return {
        "id": post.get("id"),
        "text": (post.get("commentary") or "")[:PREVIEW_CHARS],
        "created": _created_at(post.get("createdAt")),
        "visibility": post.get("visibility"),
        "lifecycleState": post.get("lifecycleState"),
        "hasContent": bool(post.get("content")),
    }


def compose_post(title: str, content: str, hashtags: str | None = None, cta: str | None = None) -> str:
    """
    Lay out a post as headline, body, optional call-to-action and hashtags.

        Title

        Body
        Call to action
        ---
        #hashtags
    """
    formatted = f"{title}\n\n{content}"
    if cta:
        formatted += f"\n{cta}"
    if hashtags:
        formatted += f"\n---\n{hashtags}"
    return formatted


class LinkedInTools:
    """
    The ten LinkedIn tool handlers, bound to a secret store and API client.

    Every public coroutine takes keyword arguments only and returns a
    ToolOutcome.
    """

    def __init__(
        self,
        secrets: SecretStore,
        client: LinkedInClient,
        storage_label: str = "Environment Secrets",
    ):
        self.secrets = secrets
        self.client = client
        self.storage_label = storage_label

    async def _credential(self, account: Account) -> Credential:
        raw = await self.secrets.read(account.key)
        return resolve(account, raw)

    # --- Publishing ---

    @handler(Operation.POST)
    async def post(
        self,
        *,
        content: str,
        account: AccountKey | str = AccountKey.PERSONAL,
        visibility: str = "PUBLIC",
    ) -> dict[str, Any]:
        acct = lookup(account)
        _check_content(content)
        _check_visibility(visibility)
        credential = await self._credential(acct)

        result = await self.client.call(
            "POST", POSTS_PATH, credential, body=_post_envelope(acct, content, visibility)
        )
        post_id = result.created_id()
        logger.info(
            "Post created",
            extra={"log_data": {"tool": Operation.POST.value, "account": acct.key.value, "post_id": post_id}},
        )
        return {
            "success": True,
            "account": acct.label,
            "postId": post_id,
            "chars": len(content),
            "visibility": visibility,
        }

    @handler(Operation.POST_ARTICLE)
    async def post_article(
        self,
        *,
        content: str,
        article_url: str,
        article_title: str | None = None,
        article_description: str | None = None,
        account: AccountKey | str = AccountKey.PERSONAL,
        visibility: str = "PUBLIC",
    ) -> dict[str, Any]:
        acct = lookup(account)
        _check_content(content)
        _check_url(article_url)
        _check_visibility(visibility)
        credential = await self._credential(acct)

        article: dict[str, Any] = {"source": article_url}
        if article_title:
            article["title"] = article_title
        if article_description:
            article["description"] = article_description
        body = _post_envelope(acct, content, visibility)
        body["content"] = {"article": article}

        result = await self.client.call("POST", POSTS_PATH, credential, body=body)
        post_id = result.created_id()
        logger.info(
            "Article post created",
            extra={
                "log_data": {
                    "tool": Operation.POST_ARTICLE.value,
                    "account": acct.key.value,
                    "post_id": post_id,
                }
            },
        )
        return {
            "success": True,
            "account": acct.label,
            "postId": post_id,
            "articleUrl": article_url,
            "chars": len(content),
        }

    @handler(Operation.FORMAT_POST)
    async def format_post(
        self,
        *,
        title: str,
        content: str,
        hashtags: str | None = None,
        cta: str | None = None,
    ) -> dict[str, Any]:
        formatted = compose_post(title, content, hashtags=hashtags, cta=cta)
        return {
            "formatted": formatted,
            "chars": len(formatted),
            "withinLimit": len(formatted) <= MAX_POST_CHARS,
        }

    # --- Identity ---

    @handler(Operation.VALIDATE_TOKEN)
    async def validate_token(self, *, account: AccountKey | str = AccountKey.PERSONAL) -> dict[str, Any]:
        acct = lookup(account)
        credential = await self._credential(acct)
        result = await self.client.call("GET", USERINFO_PATH, credential)

        profile = result.data if isinstance(result.data, dict) else {}
        name = profile.get("name") or " ".join(
            part for part in (profile.get("given_name"), profile.get("family_name")) if part
        )
        info: dict[str, Any] = {
            "valid": True,
            "account": acct.label,
            "name": name,
            "email": profile.get("email") or "not available",
            "scope": credential.effective_scope(acct),
        }
        expiry = credential.expiry()
        if expiry is not None:
            info["expiresAt"] = expiry.expires_at_iso()
            info["daysLeft"] = expiry.days_left
        return info

    @handler(Operation.GET_PROFILE)
    async def get_profile(self, *, account: AccountKey | str = AccountKey.PERSONAL) -> Any:
        acct = lookup(account)
        credential = await self._credential(acct)
        result = await self.client.call("GET", USERINFO_PATH, credential)
        return result.payload()

    # --- Posts ---

    @handler(Operation.LIST_POSTS)
    async def list_posts(self, *, account: AccountKey | str = AccountKey.PERSONAL, count: int = 10) -> dict[str, Any]:
        acct = lookup(account)
        _check_count(count)
        credential = await self._credential(acct)

        result = await self.client.call(
            "GET",
            POSTS_PATH,
            credential,
            params={"author": acct.author_urn, "count": count},
        )
        elements = result.elements()
        if not elements:
            return {"posts": [], "account": acct.label}

        posts = [_shape_post(post) for post in elements]
        return {"account": acct.label, "total": len(posts), "posts": posts}

    @handler(Operation.GET_POST)
    async def get_post(self, *, post_id: str, account: AccountKey | str = AccountKey.PERSONAL) -> Any:
        acct = lookup(account)
        _check_post_id(post_id)
        credential = await self._credential(acct)
        result = await self.client.call("GET", _post_path(post_id), credential)
        return result.payload()

    @handler(Operation.DELETE_POST)
    async def delete_post(self, *, post_id: str, account: AccountKey | str = AccountKey.PERSONAL) -> dict[str, Any]:
        acct = lookup(account)
        _check_post_id(post_id)
        credential = await self._credential(acct)
        await self.client.call("DELETE", _post_path(post_id), credential)
        logger.info(
            "Post deleted",
            extra={"log_data": {"tool": Operation.DELETE_POST.value, "account": acct.key.value, "post_id": post_id}},
        )
        return {"success": True, "deleted": post_id}

    # --- Organizations ---

    @handler(Operation.LIST_ORGANIZATIONS)
    async def list_organizations(self, *, account: AccountKey | str = AccountKey.PERSONAL) -> dict[str, Any]:
        acct = lookup(account)
        credential = await self._credential(acct)
        result = await self.client.call(
            "GET", ORGANIZATION_ACLS_PATH, credential, params={"q": "roleAssignee"}
        )
        elements = result.elements()
        if not elements:
            return {"organizations": [], "message": "No manageable organizations found."}
        return {
            "organizations": [
                {"organizationUrn": acl.get("organization"), "role": acl.get("role")}
                for acl in elements
            ]
        }

    # --- Server ---

    @handler(Operation.STATUS)
    async def status(self) -> dict[str, Any]:
        secrets = await collect_secrets(self.secrets)
        return {
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "apiEndpoint": f"{self.client.base_url}{POSTS_PATH}",
            "apiVersion": self.client.api_version,
            "storage": self.storage_label,
            "accounts": summarize(secrets),
        }

