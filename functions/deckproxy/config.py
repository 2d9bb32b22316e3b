"""
Configuration and settings for the proxy service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Upstream APIs
    gemini_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    mw_api_key: Optional[str] = Field(default=None, validation_alias="MW_API_KEY")

    # Remote key-value store (Upstash-style REST API)
    kv_rest_api_url: Optional[str] = Field(
        default=None, validation_alias="KV_REST_API_URL"
    )
    kv_rest_api_token: Optional[str] = Field(
        default=None, validation_alias="KV_REST_API_TOKEN"
    )

    # Local fallback store
    local_db_path: str = Field(default="local_db.json", validation_alias="LOCAL_DB_PATH")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="DECKPROXY_USE_IN_MEMORY_BACKENDS"
    )
    log_level: str = Field(default="INFO", validation_alias="DECKPROXY_LOG_LEVEL")

    host: str = Field(default="0.0.0.0", validation_alias="DECKPROXY_HOST")
    port: int = Field(default=3000, validation_alias="PORT")

    # Built frontend served at /
    static_dir: str = Field(default="dist", validation_alias="STATIC_DIR")

    @property
    def use_remote_store(self) -> bool:
        return bool(self.kv_rest_api_url and self.kv_rest_api_token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
