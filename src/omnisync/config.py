"""Configuration loading for Omnisync."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from omnisync.errors import ConfigError

OMNIVORE_API_ENDPOINT = "https://api-prod.omnivore.app/api/graphql"


@dataclass(frozen=True)
class SyncConfig:
    """Immutable per-invocation configuration for the sync core."""

    api_key: str
    directory: Path
    api_endpoint: str = OMNIVORE_API_ENDPOINT
    request_timeout: float = 30.0
    image_timeout: float = 30.0
    page_size: int = 20
    max_pages: int = 500
    max_image_bytes: int = 20 * 1024 * 1024
    strict_listing: bool = False

    def require_api_key(self) -> str:
        """Return the API key, or raise ConfigError when it is not set."""
        if not self.api_key or not self.api_key.strip():
            raise ConfigError("API key is not set")
        return self.api_key


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OMNISYNC_",
        env_file=".env",
        extra="ignore",
    )

    # Omnivore settings
    api_key: SecretStr = Field(default=SecretStr(""), description="Omnivore API key")
    api_endpoint: str = Field(
        default=OMNIVORE_API_ENDPOINT, description="Omnivore GraphQL endpoint"
    )

    # Output settings
    directory: Path = Field(
        default=Path("~/omnivore"), description="Folder receiving the HTML files"
    )

    # Network settings
    request_timeout: float = Field(default=30.0, gt=0, description="GraphQL timeout (s)")
    image_timeout: float = Field(default=30.0, gt=0, description="Image fetch timeout (s)")
    page_size: int = Field(default=20, ge=1, le=100, description="Articles per search page")
    max_pages: int = Field(default=500, ge=1, description="Upper bound on search pages")
    max_image_bytes: int = Field(
        default=20 * 1024 * 1024, ge=1, description="Largest image that gets embedded"
    )
    strict_listing: bool = Field(
        default=False, description="Treat malformed search responses as errors"
    )

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=True, description="Emit JSON log lines")

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: SecretStr) -> SecretStr:
        """Strip surrounding whitespace from the API key."""
        return SecretStr(v.get_secret_value().strip())

    @field_validator("directory")
    @classmethod
    def expand_directory(cls, v: Path) -> Path:
        """Expand a leading ``~`` in the download folder."""
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is a known logging level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(
                f"OMNISYNC_LOG_LEVEL '{v}' is not a valid logging level."
            )
        return level

    def to_sync_config(self) -> SyncConfig:
        """Snapshot the settings into an immutable SyncConfig."""
        return SyncConfig(
            api_key=self.api_key.get_secret_value(),
            directory=self.directory,
            api_endpoint=self.api_endpoint,
            request_timeout=self.request_timeout,
            image_timeout=self.image_timeout,
            page_size=self.page_size,
            max_pages=self.max_pages,
            max_image_bytes=self.max_image_bytes,
            strict_listing=self.strict_listing,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
