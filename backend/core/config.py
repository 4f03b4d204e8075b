"""
Backend Configuration Module

Centralized settings management using Pydantic.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App Info
    app_name: str = Field(default="JeetAble Assistant", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8080, alias="PORT")

    # CORS (for the Next.js frontend)
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ORIGINS",
    )

    # Requests
    max_message_length: int = Field(default=1000, alias="MAX_MESSAGE_LENGTH")
    default_language: str = Field(default="en", alias="DEFAULT_LANGUAGE")

    # Session log
    session_backend: str = Field(default="memory", alias="SESSION_BACKEND")  # memory | redis
    session_ttl_seconds: int = Field(default=1800, alias="SESSION_TTL_SECONDS")  # 30 minutes
    session_max_entries: int = Field(default=200, alias="SESSION_MAX_ENTRIES")
    session_sweep_interval: int = Field(default=60, alias="SESSION_SWEEP_INTERVAL")
    session_key_prefix: str = Field(default="session:v1:", alias="SESSION_KEY_PREFIX")

    # Redis (for the shared session log)
    redis_host: str = Field(default="127.0.0.1", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
