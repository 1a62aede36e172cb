"""Configuration management for the odds consensus library.

Settings are loaded from environment variables (and an optional .env file)
using pydantic-settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    - ODDS_API_KEY / THE_ODDS_API_KEY: The Odds API key (required to build a client)
    - ODDS_API_BASE_URL: API root (default: v4 production endpoint)
    - ODDS_REGION: Default bookmaker region (default: us)
    - REQUEST_TIMEOUT: Per-request timeout in seconds (default: 15)
    - LOW_QUOTA_THRESHOLD: Remaining-request count that triggers a warning (default: 50)
    - PROPS_CONCURRENCY: Max concurrent per-event prop fetches (default: 4)
    - LOG_MODE: "development" (console) or "production" (JSON)
    """

    odds_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("odds_api_key", "ODDS_API_KEY", "THE_ODDS_API_KEY"),
    )
    odds_api_base_url: str = Field(default="https://api.the-odds-api.com/v4")
    odds_region: Literal["us", "us2", "uk", "eu", "au"] = Field(default="us")
    request_timeout: float = Field(default=15.0, gt=0, le=120)
    low_quota_threshold: int = Field(default=50, ge=0)
    props_concurrency: int = Field(default=4, ge=1, le=32)
    log_mode: Literal["development", "production"] = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance (singleton).

    Returns:
        Settings instance with validated configuration
    """
    return Settings()
