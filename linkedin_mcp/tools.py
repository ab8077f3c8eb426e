"""
Tool catalog and scope-based access mapping.

This module names the ten LinkedIn tools this server exposes and the caller
scope each one requires:

    TOOL_SCOPE_MAP = {
        Operation.POST: "linkedin:write",
        Operation.GET_PROFILE: "linkedin:read",
        ...
    }

server.py registers the tool functions. auth.TokenInfo.may_call and the
AuthMiddleware read TOOL_SCOPE_MAP from here to decide whether a caller's
token grants access to a tool.

Scope naming convention: "<resource>:<action>". Tools that change what is
published on LinkedIn (create or delete a post) need "linkedin:write";
everything else, including the offline formatting and status tools, needs
"linkedin:read". Scopes are additive: a token with both sees every tool.
"""

from enum import Enum

SERVER_NAME = "linkedin-mcp-http"
SERVER_VERSION = "1.0.0"

READ_SCOPE = "linkedin:read"
WRITE_SCOPE = "linkedin:write"


class Operation(str, Enum):
    POST = "linkedin_post"
    POST_ARTICLE = "linkedin_post_article"
    FORMAT_POST = "linkedin_format_post"
    VALIDATE_TOKEN = "linkedin_validate_token"
    GET_PROFILE = "linkedin_get_profile"
    LIST_POSTS = "linkedin_list_posts"
    GET_POST = "linkedin_get_post"
    DELETE_POST = "linkedin_delete_post"
    LIST_ORGANIZATIONS = "linkedin_list_organizations"
    STATUS = "linkedin_status"


# Example token payloads and their tool access:
#   {"scope": ["linkedin:read"]}                     -> every tool except post/article/delete
#   {"scope": ["linkedin:read", "linkedin:write"]}   -> all ten tools
#   {"scope": []}                                    -> no tools
TOOL_SCOPE_MAP: dict[str, str] = {
    Operation.POST.value: WRITE_SCOPE,
    Operation.POST_ARTICLE.value: WRITE_SCOPE,
    Operation.DELETE_POST.value: WRITE_SCOPE,
    Operation.FORMAT_POST.value: READ_SCOPE,
    Operation.VALIDATE_TOKEN.value: READ_SCOPE,
    Operation.GET_PROFILE.value: READ_SCOPE,
    Operation.LIST_POSTS.value: READ_SCOPE,
    Operation.GET_POST.value: READ_SCOPE,
    Operation.LIST_ORGANIZATIONS.value: READ_SCOPE,
    Operation.STATUS.value: READ_SCOPE,
}
