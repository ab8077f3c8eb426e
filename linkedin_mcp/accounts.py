"""
The fixed catalog of LinkedIn identities this server acts on behalf of.

There is one personal profile and two company pages. The set is closed:
adding an account means adding an AccountKey member and an ACCOUNTS entry,
and the tool schemas pick it up automatically because they are typed with
AccountKey.

    ACCOUNTS = {
        AccountKey.PERSONAL: Account(label, author_urn, required_scope),
        ...
    }

The author URN is what LinkedIn expects in the "author" field of a post.
The required scope is the OAuth permission a token for that identity must
carry to publish; it is reported when the stored token has no scope metadata.
"""

from dataclasses import dataclass
from enum import Enum

from linkedin_mcp.errors import UnknownAccount


class AccountKey(str, Enum):
    PERSONAL = "personal"
    MOBICYCLE = "mobicycle"
    MOBICYCLE_PRODUCTIONS = "mobicycle-productions"


@dataclass(frozen=True)
class Account:
    """
    A catalog entry. Immutable for the lifetime of the process.

    Attributes:
        key: Catalog key
        label: Display name shown in tool results
        author_urn: LinkedIn URN used as the post author
        required_scope: OAuth scope needed to post as this identity
    """

    key: AccountKey
    label: str
    author_urn: str
    required_scope: str


ACCOUNTS: dict[AccountKey, Account] = {
    AccountKey.PERSONAL: Account(
        key=AccountKey.PERSONAL,
        label="Rose Scott (Personal)",
        author_urn="urn:li:person:TiOsO5-QU5",
        required_scope="w_member_social",
    ),
    AccountKey.MOBICYCLE: Account(
        key=AccountKey.MOBICYCLE,
        label="MobiCycle (Company)",
        author_urn="urn:li:organization:94952386",
        required_scope="w_organization_social",
    ),
    AccountKey.MOBICYCLE_PRODUCTIONS: Account(
        key=AccountKey.MOBICYCLE_PRODUCTIONS,
        label="MobiCycle Productions (Company)",
        author_urn="urn:li:organization:105189353",
        required_scope="w_organization_social",
    ),
}


def lookup(key: str | AccountKey) -> Account:
    """
    Return the catalog entry for `key`.

    Tool schemas already restrict `account` to AccountKey values, but this is
    re-checked here so direct callers get the same guarantee.

    Raises:
        UnknownAccount: If `key` is not a catalog key
    """
    try:
        account_key = AccountKey(key)
    except ValueError:
        options = ", ".join(k.value for k in AccountKey)
        raise UnknownAccount(f"Unknown account: {key}. Options: {options}")
    return ACCOUNTS[account_key]


def secret_name(key: AccountKey) -> str:
    """Host secret holding the token for `key`, e.g. LINKEDIN_TOKEN_MOBICYCLE_PRODUCTIONS."""
    return "LINKEDIN_TOKEN_" + key.value.upper().replace("-", "_")
