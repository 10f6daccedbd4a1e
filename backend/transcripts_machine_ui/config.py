from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class UiSettings(BaseSettings):
    """Front-end settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    transcripts_api_url: str = "http://localhost:8000"
    request_timeout: float = 600.0

    # Outbound links shown in the header and footer
    launch_post_url: str = "https://twitter.com"
    github_url: str = "https://github.com/yourusername/yt-operator"
    x_account_url: str = "https://twitter.com/yourusername"


@lru_cache
def get_ui_settings() -> UiSettings:
    """Get cached UI settings instance."""
    return UiSettings()
