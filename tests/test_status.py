"""
Unit tests for the offline status report (linkedin_mcp/status.py).

The report must always contain every catalog account, and one account with
a broken secret must not affect the others.
"""

from datetime import datetime, timezone

from linkedin_mcp.accounts import AccountKey
from linkedin_mcp.secret_store import SecretStore
from linkedin_mcp.status import UNREADABLE, collect_secrets, configured_accounts, summarize

STRUCTURED_SECRET = (
    '{"access_token":"abc123","scope":"w_member_social",'
    '"generated_at":"2024-01-01T00:00:00Z","expires_in":5184000}'
)
NOW = datetime(2024, 1, 31, tzinfo=timezone.utc)


class TestSummarize:
    def test_two_configured_one_absent(self):
        accounts = summarize(
            {
                AccountKey.PERSONAL: STRUCTURED_SECRET,
                AccountKey.MOBICYCLE: "bare-token",
                AccountKey.MOBICYCLE_PRODUCTIONS: None,
            },
            now=NOW,
        )

        assert list(accounts) == ["personal", "mobicycle", "mobicycle-productions"]
        assert accounts["personal"] == {
            "label": "Rose Scott (Personal)",
            "status": "token_present",
            "scope": "w_member_social",
            "authorUrn": "urn:li:person:TiOsO5-QU5",
            "expiresAt": "2024-03-01T00:00:00.000Z",
            "daysLeft": 30,
        }
        assert accounts["mobicycle"] == {
            "label": "MobiCycle (Company)",
            "status": "token_present",
            "scope": "w_organization_social",
            "authorUrn": "urn:li:organization:94952386",
        }
        assert accounts["mobicycle-productions"] == {
            "label": "MobiCycle Productions (Company)",
            "status": "no_secret_configured",
            "authorUrn": "urn:li:organization:105189353",
        }

    def test_missing_keys_count_as_not_configured(self):
        accounts = summarize({})
        assert {entry["status"] for entry in accounts.values()} == {"no_secret_configured"}

    def test_unreadable_metadata_only_drops_expiry(self):
        odd = '{"access_token": "abc", "scope": "w_member_social", "generated_at": "not-a-date", "expires_in": 60}'

        accounts = summarize({AccountKey.PERSONAL: odd, AccountKey.MOBICYCLE: "ok"}, now=NOW)

        assert accounts["personal"] == {
            "label": "Rose Scott (Personal)",
            "status": "token_present",
            "scope": "w_member_social",
            "authorUrn": "urn:li:person:TiOsO5-QU5",
        }
        assert accounts["mobicycle"]["status"] == "token_present"

    def test_unreadable_secret(self):
        accounts = summarize({AccountKey.MOBICYCLE: UNREADABLE})
        assert accounts["mobicycle"]["status"] == "error_reading_secret"


class _FlakyStore(SecretStore):
    async def read(self, key):
        if key is AccountKey.MOBICYCLE:
            raise OSError("secret backend unavailable")
        return "token-" + key.value


class TestCollectSecrets:
    async def test_reads_every_account(self):
        secrets = await collect_secrets(SecretStore({"LINKEDIN_TOKEN_PERSONAL": "abc"}))

        assert secrets == {
            AccountKey.PERSONAL: "abc",
            AccountKey.MOBICYCLE: None,
            AccountKey.MOBICYCLE_PRODUCTIONS: None,
        }
        assert configured_accounts(secrets) == ["personal"]

    async def test_read_failure_is_isolated(self):
        secrets = await collect_secrets(_FlakyStore())

        assert secrets[AccountKey.MOBICYCLE] is UNREADABLE
        assert secrets[AccountKey.PERSONAL] == "token-personal"
        assert configured_accounts(secrets) == ["personal", "mobicycle-productions"]
        assert summarize(secrets)["mobicycle"]["status"] == "error_reading_secret"
