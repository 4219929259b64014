"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Coach Calendar Intelligence Engine"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_DBNAME: str = "postgres"

    # Full URL override (e.g. ``sqlite://`` for local runs and tests)
    DATABASE_URL_OVERRIDE: Optional[str] = None

    # Client-preference cache used by the optimization scorer
    PREFERENCE_CACHE_MAXSIZE: int = 512
    PREFERENCE_CACHE_TTL_SECONDS: int = 300

    # Defaults for interactive calls
    DEFAULT_MIN_GAP_MINUTES: int = 15
    DEFAULT_SUGGESTION_LIMIT: int = 5
    DEFAULT_WORKLOAD_WINDOW_DAYS: int = 7

    # Periodic jobs
    EXPIRATION_ALERT_THRESHOLDS: List[int] = [7, 3, 1]
    NOTIFICATION_DEDUP_HOURS: int = 24

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}"
                f":{self.DATABASE_PORT}/{self.DATABASE_DBNAME}")


# Global settings instance
settings = Settings()
