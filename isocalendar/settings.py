from typing import Literal

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    github_graphql_url: str = "https://api.github.com/graphql"
    github_token: str | None = None
    github_timeout_seconds: float = 20.0
    secondary_feed_host: str = "raw.githubusercontent.com"
    secondary_feed_branch: str = "metrics-renders"
    feed_timeout_seconds: float = 15.0
    isocalendar_enabled: bool = True
    default_duration: Literal["full-year", "half-year"] = "half-year"
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def get_settings() -> Settings:
    """Build settings for request handlers; overridable in tests."""

    return Settings()
