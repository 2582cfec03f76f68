"""Application settings via Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _asyncpg_connect_args_from_url(database_url: str) -> dict[str, object]:
    """
    Compute asyncpg connect_args based on DATABASE_URL.

    Railway Postgres uses an internal hostname (e.g. postgres.railway.internal)
    that rejects SSL negotiation. In that case we must explicitly disable SSL.
    """
    host = urlparse(database_url).hostname or ""
    if host.endswith(".railway.internal"):
        return {"ssl": False, "timeout": 20}
    return {}


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Photo Sync API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Local store (SQLite on device, Postgres when hosted)
    database_url: str = "sqlite+aiosqlite:///./photo_sync.db"

    @property
    def async_database_url(self) -> str:
        """Get database URL with an async driver.

        Hosted Postgres provides postgresql:// but we need postgresql+asyncpg:// for async.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite://"):
            url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @property
    def db_connect_args(self) -> dict[str, object]:
        """Extra connect args for the async driver (e.g. Railway SSL quirks)."""
        url = self.async_database_url
        if url.startswith("postgresql+asyncpg://"):
            return _asyncpg_connect_args_from_url(url)
        return {}

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias=AliasChoices("CORS_ORIGINS", "ALLOWED_ORIGINS"),
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: object) -> list[str]:
        """Accept a comma-separated string or an already-parsed list."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(x).strip() for x in v if str(x).strip()]
        return [part.strip() for part in str(v).split(",") if part.strip()]

    # Unsplash (remote source)
    unsplash_access_key: str = Field(
        default="",
        validation_alias=AliasChoices("UNSPLASH_ACCESS_KEY", "UNSPLASH_CLIENT_ID"),
    )
    unsplash_base_url: str = Field(
        default="https://api.unsplash.com",
        validation_alias=AliasChoices("UNSPLASH_BASE_URL"),
    )
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # Snapshot cache (last-known-good collections)
    snapshot_dir: Path = Field(
        default=Path("./.photo_sync_cache"),
        validation_alias=AliasChoices("SNAPSHOT_DIR", "PHOTO_SYNC_SNAPSHOT_DIR"),
    )

    # Batch sizes
    feed_batch_size: int = Field(default=30, ge=1, le=30)
    topics_per_page: int = Field(default=6, ge=1, le=30)
    topic_photos_per_page: int = Field(default=10, ge=1, le=30)
    clear_refetch_count: int = Field(default=20, ge=1, le=30)

    # Retry policy (constant backoff)
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_delay_seconds: float = Field(
        default=3.0,
        ge=0.0,
        description="Fixed delay between remote attempts; not exponential.",
    )

    # Free-tier limits
    max_free_favorites: int = Field(default=8, ge=0)
    max_free_pages: int = Field(default=3, ge=0)
    privileged_default: bool = Field(
        default=False,
        validation_alias=AliasChoices("PRIVILEGED_DEFAULT", "VIP_DEFAULT"),
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
