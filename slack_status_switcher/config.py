"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_preferences_path() -> Path:
    return Path.home() / ".config" / "slack-status-switcher" / "preferences.json"


class Settings(BaseSettings):
    """
    Configuration for the status switcher.

    Every field can be overridden with a SLACK_STATUS_ prefixed environment
    variable, e.g. SLACK_STATUS_LOG_LEVEL=DEBUG.
    """

    model_config = SettingsConfigDict(
        env_prefix="SLACK_STATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Slack Web API
    api_base_url: str = "https://slack.com/api"
    request_timeout: float = Field(default=30.0, gt=0)
    token_prefix: str = "xoxp-"

    # Secure storage for workspace tokens
    keyring_service: str = "com.slackstatusswitcher.workspaces"
    keyring_account: str = "workspaces"

    # Plain key-value storage for presets
    preferences_path: Path = Field(default_factory=_default_preferences_path)

    # How long the results banner stays visible after a broadcast
    results_display_seconds: float = Field(default=3.0, ge=0)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
