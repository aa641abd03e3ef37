from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./timetable.db", alias="DATABASE_URL")

    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Reported for teachers without a personal cap; informational only
    default_max_periods_per_day: int = Field(8, alias="DEFAULT_MAX_PERIODS_PER_DAY")

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOW_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
