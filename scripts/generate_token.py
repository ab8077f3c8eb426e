"""
CLI utility to mint caller JWTs for the LinkedIn MCP server.

These tokens authenticate whoever calls the MCP endpoint (an agent, a
scheduler, a person in an MCP client). They are NOT LinkedIn tokens: LinkedIn
access tokens are stored per account as LINKEDIN_TOKEN_* secrets (see
scripts/pack_secret.py).

Usage examples:

    # Read-only caller: status, profile, list/get posts, format
    uv run python -m scripts.generate_token --sub reviewer --scope linkedin:read

    # Publishing caller
    uv run python -m scripts.generate_token --sub content-agent --scope linkedin:read linkedin:write

    # Short-lived token with a custom secret (must match MCP_JWT_SECRET_KEY)
    uv run python -m scripts.generate_token --sub ci --scope linkedin:read --exp-hours 1 --secret my-secret

Connect an MCP client with the token:

    claude mcp add --transport http linkedin http://localhost:8080/mcp \\
      --header "Authorization: Bearer <token>"
"""

import argparse
import datetime

import jwt

from linkedin_mcp.config import settings
from linkedin_mcp.tools import READ_SCOPE, TOOL_SCOPE_MAP, WRITE_SCOPE


def generate_token(
    subject: str,
    scopes: list[str],
    secret: str | None = None,
    algorithm: str | None = None,
    exp_hours: float = 8.0,
) -> str:
    """
    Sign a caller token.

    Args:
        subject: Who the token identifies (becomes the "sub" claim)
        scopes: Tool scopes, e.g. ["linkedin:read", "linkedin:write"]
        secret: Signing key, defaults to the server's MCP_JWT_SECRET_KEY
        algorithm: JWT signing algorithm, defaults to MCP_JWT_ALGORITHM
        exp_hours: Hours until expiration (negative = already expired)
    """
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        "sub": subject,
        "scope": scopes,
        "iat": now,
        "exp": now + datetime.timedelta(hours=exp_hours),
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def tools_for(scopes: list[str]) -> list[str]:
    """Names of the tools a token with these scopes can see."""
    return sorted(name for name, scope in TOOL_SCOPE_MAP.items() if scope in scopes)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate caller JWTs for the LinkedIn MCP server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Scopes:
  linkedin:read    status, validate, profile, list/get posts, organizations, format
  linkedin:write   post, post with article, delete post
        """,
    )
    parser.add_argument("--sub", required=True, help="Caller identity (e.g. 'content-agent')")
    parser.add_argument(
        "--scope",
        nargs="+",
        default=[READ_SCOPE],
        choices=[READ_SCOPE, WRITE_SCOPE],
        help="Space-separated scopes (default: linkedin:read)",
    )
    parser.add_argument("--secret", help="JWT signing secret (default: MCP_JWT_SECRET_KEY)")
    parser.add_argument("--algorithm", help="JWT signing algorithm (default: MCP_JWT_ALGORITHM)")
    parser.add_argument(
        "--exp-hours",
        type=float,
        default=8.0,
        help="Hours until token expires (default: 8)",
    )
    args = parser.parse_args()

    token = generate_token(
        subject=args.sub,
        scopes=args.scope,
        secret=args.secret,
        algorithm=args.algorithm,
        exp_hours=args.exp_hours,
    )

    print(f"Caller:  {args.sub}")
    print(f"Tools:   {', '.join(tools_for(args.scope)) or '(none)'}")
    print(f"Expires: in {args.exp_hours}h")
    print()
    print(token)


if __name__ == "__main__":
    main()
