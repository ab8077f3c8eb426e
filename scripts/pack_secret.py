"""
CLI utility to package a LinkedIn access token with its issuance metadata.

A bare token works as an account secret, but then linkedin_status and
linkedin_validate_token cannot report when it expires. Storing the packed form
lets them compute expiry:

    {"access_token": "...", "scope": "w_member_social",
     "generated_at": "2026-10-18T09:00:00Z", "expires_in": 5184000}

Usage:

    uv run python -m scripts.pack_secret --token AQX... --scope w_member_social

Then store the printed JSON as the account's secret, e.g. LINKEDIN_TOKEN_PERSONAL.
"""

import argparse
import datetime
import json

# LinkedIn member tokens live 60 days
DEFAULT_EXPIRES_IN = 60 * 86400


def pack_secret(
    access_token: str,
    scope: str | None = None,
    expires_in: int = DEFAULT_EXPIRES_IN,
    generated_at: datetime.datetime | None = None,
) -> str:
    """Return the JSON secret blob for `access_token`."""
    generated_at = generated_at or datetime.datetime.now(datetime.timezone.utc)
    blob = {
        "access_token": access_token,
        "generated_at": generated_at.astimezone(datetime.timezone.utc)
        .isoformat(timespec="seconds")
        .replace("+00:00", "Z"),
        "expires_in": expires_in,
    }
    if scope:
        blob["scope"] = scope
    return json.dumps(blob)


def main() -> None:
    parser = argparse.ArgumentParser(description="Package a LinkedIn token as a structured account secret.")
    parser.add_argument("--token", required=True, help="LinkedIn access token")
    parser.add_argument("--scope", help="Granted OAuth scope (e.g. w_member_social)")
    parser.add_argument(
        "--expires-in",
        type=int,
        default=DEFAULT_EXPIRES_IN,
        help="Token lifetime in seconds from now (default: 60 days)",
    )
    args = parser.parse_args()
    print(pack_secret(args.token, scope=args.scope, expires_in=args.expires_in))


if __name__ == "__main__":
    main()
