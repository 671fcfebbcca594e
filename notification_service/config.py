"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key shared with the user service to verify JWT tokens",
        min_length=1,
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_user_id_claim: str = Field(
        default="id",
        description="Name of the JWT claim that carries the numeric user identifier",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before tokens issued by this service expire",
        gt=0,
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL of the pub/sub broker shared with producer services",
    )
    notifications_channel: str = Field(
        default="notifications",
        description="Pub/sub channel on which producers publish notification events",
        min_length=1,
    )
    consumer_enabled: bool = Field(
        default=True,
        description="Start the broker subscription loop together with the API",
    )
    history_limit: int = Field(
        default=50,
        description="Maximum number of notifications returned by the history endpoint",
        gt=0,
    )
    store_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for a single store write issued by the consumer",
        gt=0,
    )
    broker_reconnect_delay_seconds: float = Field(
        default=2.0,
        description="Delay before re-subscribing after a broker connection failure",
        ge=0,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: str = Field(default="INFO", description="Root logging level")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
