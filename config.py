"""
Application configuration for the Foodie API.

Settings are read from environment variables (or a .env file) once at
process start and handed to the application factory in main.py.
"""

import logging
import sys
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Foodie API", description="Application display name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable verbose logging")
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=5000, description="API server port")

    # Database
    database_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )
    database_name: str = Field(default="Foodie", description="MongoDB database name")

    # Auth
    secret_key: str = Field(default="change-me", description="JWT signing key")
    algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(default=60, description="Bearer token lifetime")
    bcrypt_rounds: int = Field(default=10, ge=4, le=31, description="bcrypt work factor")

    # CORS
    allowed_origins: List[str] = Field(
        default=["http://192.168.0.109:8081", "http://localhost:8082"],
        description="Origins allowed to call the API"
    )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()


def setup_logging(settings: Settings, level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        settings: Loaded settings; ``debug`` switches the level to DEBUG
        level: Logging level used when not in debug mode

    Returns:
        The application's root logger
    """
    if settings.debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)-12s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    return logging.getLogger("foodie")
