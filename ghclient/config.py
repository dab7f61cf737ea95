"""ghclient configuration using pydantic-settings.

Settings are read from environment variables with the GHCLIENT_ prefix
(e.g. GHCLIENT_GITHUB_TOKEN, GHCLIENT_OWNER).
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GhClientSettings(BaseSettings):
    """Repository client configuration from environment variables.

    Required fields:
    - github_token: token the client authenticates with
    - owner: owner (user or organization) of the target repository
    - repo: name of the target repository
    """

    model_config = SettingsConfigDict(
        env_prefix="GHCLIENT_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    github_token: str

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    # -------------------------------------------------------------------------
    # Repository
    # -------------------------------------------------------------------------
    owner: str
    repo: str

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = "INFO"

    # Render log events as JSON; console rendering otherwise
    log_json: bool = True

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Validate that GitHub token is not empty."""
        if not v or not v.strip():
            raise ValueError("github_token cannot be empty")
        return v

    @field_validator("github_base_url")
    @classmethod
    def validate_github_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("owner", "repo")
    @classmethod
    def validate_repository_part(cls, v: str) -> str:
        """Validate that owner and repo are not empty."""
        if not v or not v.strip():
            raise ValueError("owner and repo cannot be empty")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level


def get_settings() -> GhClientSettings:
    """Create and return GhClientSettings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return GhClientSettings()


def redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)
