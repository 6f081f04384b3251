"""
Configuration module - Central access point for environment variables.

CRITICAL: Access ALL environment variables through this module.
NEVER use os.getenv() directly in application code.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(
        default="json",
        description="Log output format: 'json' (structured) or 'text' (human readable)"
    )

    # Dialogue engine
    NLU_ENABLED: bool = Field(
        default=False,
        description="Route the opening utterance through intent/entity extraction (AskWhat step)"
    )
    MAX_FAILED_TURNS: int = Field(
        default=5,
        ge=0,
        description="Consecutive no-input/invalid turns on one step before the session is abandoned (0 = unlimited)"
    )
    ASSISTANT_NAME: str = Field(
        default="the appointment assistant",
        description="Name used in the farewell line"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
