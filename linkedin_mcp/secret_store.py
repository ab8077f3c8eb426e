"""
Host-provided account secrets.

Each account's token lives in its own environment variable
(LINKEDIN_TOKEN_PERSONAL, LINKEDIN_TOKEN_MOBICYCLE, ...), injected by the
platform's secret manager. For local runs the same names may sit in a .env
file; a real environment variable wins over the file.

The store reads on every call and keeps nothing in memory, so a rotated
secret is used on the next tool call.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from linkedin_mcp.accounts import AccountKey, secret_name


class SecretStore:
    """
    Reads raw account secrets from the environment.

    Args:
        environ: Mapping to read from instead of the process environment.
                 When given, env_file is ignored.
        env_file: Optional dotenv file consulted when the variable is not
                  set in os.environ. A missing file is treated as empty.
    """

    def __init__(self, environ: Mapping[str, str] | None = None, env_file: str | Path | None = None):
        self._environ = environ
        self._env_file = env_file

    async def read(self, key: AccountKey) -> str | None:
        """Return the raw secret for `key`, or None if not configured."""
        name = secret_name(key)
        if self._environ is not None:
            return self._environ.get(name) or None

        value = os.environ.get(name)
        if not value and self._env_file is not None and os.path.isfile(self._env_file):
            value = dotenv_values(self._env_file).get(name)
        return value or None
