"""
Configuration management for the adaptive planner.

All environment variables are loaded and validated here; a local `.env`
file is honoured.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Generation API
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None)
    ANTHROPIC_API_URL: str = Field(default="https://api.anthropic.com/v1/messages")
    ANTHROPIC_VERSION: str = Field(default="2023-06-01")
    ANTHROPIC_MODEL: str = Field(default="claude-sonnet-4-20250514")
    GENERATION_MAX_TOKENS: int = Field(default=8000, gt=0)
    GENERATION_TIMEOUT_SECONDS: float = Field(default=120.0, gt=0)

    # Failure policy
    TRANSPORT_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    TRANSPORT_RETRY_WAIT_SECONDS: float = Field(default=1.0, ge=0)
    PARSE_MAX_ATTEMPTS: int = Field(default=2, ge=1)
    FALLBACK_ENABLED: bool = Field(default=True)

    # Storage
    DATABASE_URL: str = Field(default="sqlite:///adaptive_planner.db")

    # HTTP API
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic log format at the configured level."""
    logging.basicConfig(
        level=(level or get_settings().LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
