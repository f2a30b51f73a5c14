"""
Configuration and settings for the site backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")

    # Database (Postgres expected); absent means in-memory storage
    database_url: Optional[str] = Field(
        default=None, validation_alias="DATABASE_URL"
    )
    auto_create_tables: bool = Field(
        default=True, validation_alias="VENUECHARGE_AUTO_CREATE_TABLES"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="VENUECHARGE_USE_IN_MEMORY_BACKENDS"
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
