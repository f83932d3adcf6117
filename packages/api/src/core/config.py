# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parents[4]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "guarantor-onboarding"
    DEBUG: bool = False
    APP_BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Frontend base URL used to build self-service invitation links.",
    )

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:3000"]

    # -- Self-service access tokens --
    TOKEN_BYTES: int = Field(
        default=32,
        description="Random bytes per token (hex encoded, so twice as many chars).",
    )
    TOKEN_EXPIRY_DAYS: int = 7
    TOKEN_MIN_EXPIRY_HOURS: int = 1
    TOKEN_MAX_EXPIRY_DAYS: int = 30

    # -- Qualification --
    MIN_REQUIRED_DOCUMENTS: int = Field(
        default=3,
        description="Uploaded documents needed before a guarantor may submit.",
    )
    INCOME_TO_RENT_MIN_RATIO: int = Field(
        default=3,
        description="Monthly income must be at least this multiple of monthly rent.",
    )
    PROPERTY_VALUE_RENT_MULTIPLIER: int = Field(
        default=24,
        description="Guarantee property must be worth at least this many months of rent.",
    )


settings = Settings()
