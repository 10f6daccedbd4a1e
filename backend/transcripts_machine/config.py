from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AutomationSettings(BaseSettings):
    """Browserbase, page automation and model-call settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Browserbase
    browserbase_api_key: Optional[str] = None
    browserbase_project_id: Optional[str] = None
    browserbase_api_url: str = "https://api.browserbase.com"
    browserbase_proxies: bool = True
    browserbase_session_timeout: int = 1000  # seconds the remote browser may live
    browserbase_request_timeout: float = 30.0

    # Page automation
    headless: bool = False
    dom_settle_timeout: float = 60.0
    player_wait_timeout: float = 15.0
    click_timeout: float = 10.0
    navigation_timeout: float = 60.0
    act_timeout: float = 90.0
    observe_timeout: float = 120.0
    max_snapshot_elements: int = 200
    max_observe_elements: int = 10_000
    max_snapshot_characters: int = 60_000
    browser_log_level: str = "WARNING"

    # Model calls
    structuring_timeout: float = 120.0
    summary_timeout: float = 60.0
    release_timeout: float = 15.0


@lru_cache
def get_automation_settings() -> AutomationSettings:
    """Get cached automation settings instance."""
    return AutomationSettings()
