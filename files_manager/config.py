"""
Configuration and settings for the files manager service.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Document store (MongoDB)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=27017)
    db_database: str = Field(default="files_manager")
    db_timeout_ms: int = Field(default=5000, ge=1)

    # Session store (Redis)
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_timeout_seconds: float = Field(default=5.0, gt=0)
    session_ttl_seconds: int = Field(default=24 * 60 * 60, ge=1)

    # Local blob storage
    folder_path: str = Field(default="/tmp/files_manager")
    page_size: int = Field(default=20, ge=1, le=1000)

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    log_level: str = Field(default="INFO")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def mongo_uri(self) -> str:
        return f"mongodb://{self.db_host}:{self.db_port}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
