"""
Turning a stored account secret into a usable credential.

Operators store LinkedIn tokens in one of two shapes:

    abc123                                         # bare access token
    {"access_token": "abc123",                     # token with metadata
     "scope": "w_member_social",
     "generated_at": "2024-01-01T00:00:00Z",
     "expires_in": 5184000}

parse_secret() accepts both, so switching between them never needs a
migration. A JSON object without an access_token is NOT rejected: the whole
string is used as a bare token, with a warning, because a token that happens
to be valid JSON must keep working.

Expiry is advisory. An expired credential is still used, and metadata that
cannot be read is dropped with a warning, leaving the expiry unknown. The
expiry math only feeds the validate and status reports. Nothing here caches:
callers resolve a fresh Credential for every tool call.
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from linkedin_mcp.accounts import Account, secret_name
from linkedin_mcp.errors import MissingCredential

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class CredentialShape(str, Enum):
    BARE = "bare"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class Expiry:
    """Computed expiry of a credential relative to a point in time."""

    expires_at: datetime
    days_left: int

    def expires_at_iso(self) -> str:
        return format_timestamp(self.expires_at)


@dataclass(frozen=True)
class Credential:
    """
    A resolved LinkedIn access token.

    Attributes:
        access_token: Bearer token, never empty
        shape: Which secret shape it was parsed from
        scope: Granted scope recorded alongside the token, if any
        issued_at: When the token was generated, if recorded
        ttl_seconds: Lifetime in seconds from issued_at, if recorded
    """

    access_token: str
    shape: CredentialShape = CredentialShape.BARE
    scope: str | None = None
    issued_at: datetime | None = None
    ttl_seconds: int | None = None

    def effective_scope(self, account: Account) -> str:
        return self.scope or account.required_scope

    def expiry(self, now: datetime | None = None) -> Expiry | None:
        """
        Compute expiry, or None when issuance metadata is incomplete.

        None means "unknown" and must never be reported as valid or expired.
        Days are rounded half up, so 1.5 days left reports as 2.
        """
        if self.issued_at is None or self.ttl_seconds is None:
            return None
        now = now or datetime.now(timezone.utc)
        expires_at = self.issued_at + timedelta(seconds=self.ttl_seconds)
        remaining = (expires_at - now).total_seconds() / SECONDS_PER_DAY
        return Expiry(expires_at=expires_at, days_left=math.floor(remaining + 0.5))


def format_timestamp(value: datetime) -> str:
    """Render as UTC ISO-8601 with milliseconds and a Z suffix."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_issued_at(value) -> datetime | None:
    if isinstance(value, str):
        try:
            issued_at = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            issued_at = None
        if issued_at is not None:
            if issued_at.tzinfo is None:
                issued_at = issued_at.replace(tzinfo=timezone.utc)
            return issued_at
    logger.warning("Ignoring unreadable generated_at in stored token: %r", value)
    return None


def _parse_ttl(value) -> int | None:
    # Numeric strings count ("5184000"); bool is an int subclass but not a lifetime
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            pass
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return int(value)
    logger.warning("Ignoring unreadable expires_in in stored token: %r", value)
    return None


def _parse_scope(value) -> str | None:
    if isinstance(value, (list, tuple)):
        value = " ".join(str(part) for part in value if part)
    elif value is not None and not isinstance(value, str):
        value = str(value)
    return value or None


def parse_secret(raw: str) -> Credential:
    """
    Parse a stored secret string into a Credential.

    Returns a STRUCTURED credential when `raw` is a JSON object with a
    non-empty access_token, otherwise a BARE credential wrapping `raw`.
    """
    try:
        parsed = json.loads(raw)
    except ValueError:
        return Credential(access_token=raw)

    if not isinstance(parsed, dict) or not parsed.get("access_token"):
        if isinstance(parsed, dict):
            logger.warning(
                "Stored secret is a JSON object without access_token; using it as a bare token"
            )
        return Credential(access_token=raw)

    issued_at = parsed.get("generated_at")
    ttl = parsed.get("expires_in")
    return Credential(
        access_token=str(parsed["access_token"]),
        shape=CredentialShape.STRUCTURED,
        scope=_parse_scope(parsed.get("scope")),
        issued_at=_parse_issued_at(issued_at) if issued_at else None,
        ttl_seconds=_parse_ttl(ttl) if ttl else None,
    )


def resolve(account: Account, raw: str | None) -> Credential:
    """
    Resolve the credential for `account` from its stored secret.

    Raises:
        MissingCredential: If no secret is configured (None or empty)
    """
    if not raw:
        raise MissingCredential(
            f"No token configured for account: {account.key.value}. "
            f"Set the {secret_name(account.key)} secret."
        )
    return parse_secret(raw)
