"""Centralized settings management for Mixpanel export ingestion."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.schemas.ingestion_config import DEFAULT_DATA_URL, DEFAULT_REST_API_URL


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from environment variables and a .env file located
    in the project root.
    """

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------------------------------
    # MIXPANEL
    # -------------------------------------------------------------------------
    MIXPANEL_API_SECRET: SecretStr | None = None
    MIXPANEL_DATA_URL: str = DEFAULT_DATA_URL
    MIXPANEL_REST_API_URL: str = DEFAULT_REST_API_URL

    # Seconds; unset keeps the HTTP client's default timeout
    REQUEST_TIMEOUT: float | None = None

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # BASE_DIR points to the project root
    BASE_DIR: Path = Path(__file__).resolve().parents[2]

    INGESTION_CONFIG_PATH: Path = BASE_DIR / "src" / "configs" / "ingestion.yaml"

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
