"""
Application configuration loaded from environment variables.

Uses pydantic-settings to define typed configuration that automatically reads
from environment variables. All server settings use the MCP_ prefix; the only
exception is the LinkedIn API version, which is also accepted from the bare
API_VERSION variable.

Per-account LinkedIn credentials are not part of this object.
They are read fresh on every tool call by linkedin_mcp.secret_store (from the
environment, then the same .env file), so a rotated token is picked up
without restarting the process.

Locally, you can set everything via environment variables or a .env file.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

# Shared by Settings and the account secret store
ENV_FILE = ".env"


class Settings(BaseSettings):
    """
    Server configuration with environment variable bindings.

    Each field maps to an environment variable with the MCP_ prefix.
    For example, `port` reads from MCP_PORT, `jwt_secret_key` reads
    from MCP_JWT_SECRET_KEY.
    """

    # --- Server settings ---

    # "0.0.0.0" is required inside containers; use "127.0.0.1" for local-only.
    host: str = "0.0.0.0"
    port: int = 8080

    # Maps to Python's logging levels ("debug", "info", "warning", ...).
    log_level: str = "info"

    # --- Caller authentication ---

    # When false, the MCP endpoint accepts unauthenticated callers and every
    # tool is visible. Only meant for local stdio-style development.
    require_auth: bool = True

    # Default is for local development only - NEVER use this in production.
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"

    # --- LinkedIn upstream ---

    # Value sent in the LinkedIn-Version header (YYYYMM).
    api_version: str = Field(
        default="202503",
        validation_alias=AliasChoices("MCP_API_VERSION", "API_VERSION"),
    )
    api_base_url: str = "https://api.linkedin.com"

    # Seconds before an upstream call is abandoned. Timeouts surface to the
    # caller like any other failure; nothing is retried.
    request_timeout: float = 30.0

    # Human-readable description of where account secrets live, reported by
    # linkedin_status and the /health endpoint.
    storage_label: str = "Environment Secrets"

    model_config = {
        "env_prefix": "MCP_",
        "env_file": ENV_FILE,
        "env_file_encoding": "utf-8",
        # .env may also hold LINKEDIN_TOKEN_* entries, read by SecretStore.
        "extra": "ignore",
    }


# Singleton instance: import this from other modules.
settings = Settings()
