"""Application configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = "storefront-sync"
    app_env: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # -------------------------------------------------------------------------
    # Outbound HTTP
    # -------------------------------------------------------------------------
    http_timeout_seconds: float = 30.0
    user_agent: str = "storefront-sync"

    # -------------------------------------------------------------------------
    # Shopify Admin API
    # -------------------------------------------------------------------------
    shopify_api_version: str = "2024-01"

    # -------------------------------------------------------------------------
    # Sync Pipeline
    # -------------------------------------------------------------------------
    sync_batch_size: int = Field(default=5, ge=1)
    sync_max_retries: int = Field(default=3, ge=1)
    sync_retry_delay_ms: int = Field(default=1000, ge=0)
    sync_backoff: Literal["linear", "exponential"] = "linear"
    sync_backoff_cap_ms: int = Field(default=10_000, ge=0)
    sync_stagger_ms: int = Field(default=100, ge=0)
    sync_chunk_pause_ms: int = Field(default=1000, ge=0)

    # -------------------------------------------------------------------------
    # Storefront Feed
    # -------------------------------------------------------------------------
    feed_page_limit: int = Field(default=250, ge=1, le=250)
    feed_max_pages: int = Field(default=1, ge=1)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
