"""
Offline credential health report for every catalog account.

No network calls are made: the report only says whether a secret is
configured, what scope it claims and when it expires (if the stored secret
records that). One unreadable account is reported as such and never hides
the others.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from linkedin_mcp.accounts import ACCOUNTS, AccountKey
from linkedin_mcp.credentials import resolve
from linkedin_mcp.secret_store import SecretStore

logger = logging.getLogger(__name__)

STATUS_NOT_CONFIGURED = "no_secret_configured"
STATUS_PRESENT = "token_present"
STATUS_ERROR = "error_reading_secret"


class _Unreadable:
    """Marks an account whose secret could not be read from the store."""


UNREADABLE = _Unreadable()


async def collect_secrets(store: SecretStore) -> dict[AccountKey, Any]:
    """Read every account's raw secret; a failed read is recorded as UNREADABLE."""
    secrets: dict[AccountKey, Any] = {}
    for key in ACCOUNTS:
        try:
            secrets[key] = await store.read(key)
        except Exception:
            logger.exception("Failed to read secret for account %s", key.value)
            secrets[key] = UNREADABLE
    return secrets


def summarize(
    secrets_by_key: Mapping[AccountKey, Any],
    now: datetime | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Build the per-account status entries.

    Args:
        secrets_by_key: Raw secret (or None) per account; accounts missing
                        from the mapping count as not configured
        now: Reference time for days-left (defaults to the current time)

    Returns:
        Mapping of account key to its status entry, one entry per catalog
        account, in catalog order
    """
    accounts: dict[str, dict[str, Any]] = {}
    for key, account in ACCOUNTS.items():
        raw = secrets_by_key.get(key)
        if raw is UNREADABLE:
            accounts[key.value] = {"label": account.label, "status": STATUS_ERROR}
            continue
        if not raw:
            accounts[key.value] = {
                "label": account.label,
                "status": STATUS_NOT_CONFIGURED,
                "authorUrn": account.author_urn,
            }
            continue

        try:
            credential = resolve(account, raw)
            entry: dict[str, Any] = {
                "label": account.label,
                "status": STATUS_PRESENT,
                "scope": credential.effective_scope(account),
                "authorUrn": account.author_urn,
            }
            expiry = credential.expiry(now)
            if expiry is not None:
                entry["expiresAt"] = expiry.expires_at_iso()
                entry["daysLeft"] = expiry.days_left
        except Exception as e:
            logger.warning("Unusable secret for account %s: %s", key.value, e)
            entry = {"label": account.label, "status": STATUS_ERROR}

        accounts[key.value] = entry
    return accounts


def configured_accounts(secrets_by_key: Mapping[AccountKey, Any]) -> list[str]:
    """Keys of accounts with a readable, non-empty secret, in catalog order."""
    return [
        key.value
        for key in ACCOUNTS
        if isinstance(secrets_by_key.get(key), str) and secrets_by_key[key]
    ]
