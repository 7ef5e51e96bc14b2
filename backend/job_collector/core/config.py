"""
Application Configuration

Centralized configuration management using Pydantic settings.
Handles environment variables, sink credentials, and collection settings.
"""

from typing import List, Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Job Collector"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = "logs"

    # Search target
    SEARCH_URL: Optional[str] = None
    JOB_KEYWORDS: str = "quant (remote)"
    JOB_GEO_ID: str = "104187078"  # Taiwan

    # Scheduling
    ENABLE_BACKGROUND_SCRAPING: bool = True
    RUN_ON_STARTUP: bool = True
    SCRAPE_INTERVAL_HOURS: float = Field(2.0, gt=0)

    # HTTP fetching
    REQUEST_DELAY_SECONDS: float = Field(3.0, ge=0)
    TIMEOUT_SECONDS: float = Field(30.0, gt=0)
    MAX_RETRIES: int = Field(3, ge=1)
    RATE_LIMIT_PER_MINUTE: int = Field(30, ge=1)
    USER_AGENT: Optional[str] = None

    # Ingestion
    MAX_ITEM_ERRORS: int = Field(5, ge=0)

    # Enrichment
    SUMMARY_MAX_SENTENCES: int = Field(2, ge=1)
    SUMMARY_MAX_LENGTH: int = Field(200, ge=1)
    ENRICHMENT_RULES_PATH: Optional[str] = None

    # Sinks
    SINK_BACKEND: str = "database"
    SINK_MIRRORS: str = ""
    DATABASE_URL: str = "sqlite+aiosqlite:///./jobs.db"
    DATABASE_ECHO: bool = False

    NOTION_API_KEY: Optional[str] = None
    NOTION_DATABASE_ID: Optional[str] = None

    GOOGLE_SERVICE_ACCOUNT_FILE: Optional[str] = None
    GOOGLE_SHEET_ID: Optional[str] = None

    def get_sink_mirrors_list(self) -> List[str]:
        """Get mirror sink backends as a list."""
        return [name.strip().lower() for name in self.SINK_MIRRORS.split(",") if name.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
