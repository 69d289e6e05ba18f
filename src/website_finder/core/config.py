"""Application configuration using Pydantic Settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings."""

    # Application
    APP_NAME: str = "Company Website Finder"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"

    # API
    API_V1_PREFIX: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["*"]

    # Storage
    UPLOAD_DIR: str = "./uploads"
    RESULTS_DIR: str = "./results"

    # Search
    SEARCH_URL_TEMPLATE: str = "https://www.bing.com/search?q={query}"
    RESULT_LINK_SELECTORS: List[str] = ["h2 > a", ".b_algo h2 a"]
    BLOCKED_DOMAINS: List[str] = [
        "linkedin.com",
        "bloomberg.com",
        "zaubacorp.com",
        "dnb.com",
        "sgpbusiness.com",
    ]
    NAVIGATION_TIMEOUT_MS: int = 20000
    SELECTOR_TIMEOUT_MS: int = 10000
    INTER_ITEM_DELAY_MS: int = 500

    # Telemetry
    SPEED_RECALC_EVERY: int = 5
    SPEED_RECALC_SECONDS: float = 30.0

    # Browser
    BROWSER_HEADLESS: bool = True
    BROWSER_USER_AGENT: Optional[str] = None
    BROWSER_DEFAULT_TIMEOUT_MS: int = 30000
    BROWSER_LAUNCH_ATTEMPTS: int = 2

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


settings = Settings()
