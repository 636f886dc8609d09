"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "PawFeed feeding schedules and portions."
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = ["PawFeed team"]

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./pawfeed.db"
    DATABASE_ECHO: bool = False

    # Feeder the API acts on when the client does not send X-Feeder-Id
    DEFAULT_FEEDER_ID: str = "feeder-001"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()
