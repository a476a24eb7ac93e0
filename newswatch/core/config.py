"""
Application configuration using pydantic-settings.
Manages storage back-ends, fetch timeouts and logging.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application settings
    APP_NAME: str = "newswatch"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage settings
    STORAGE_DIR: str = "storage"
    RECORDS_FILENAME: str = "records.jsonl"
    OBJECT_STORE_BACKEND: str = "filesystem"

    # Redis settings (object store backend "redis")
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0
    REDIS_POOL_SIZE: int = 10
    REDIS_KEY_PREFIX: str = "newswatch:"

    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Fetch settings
    STATIC_FETCH_TIMEOUT_SECONDS: float = 60.0
    CONNECT_TIMEOUT_SECONDS: float = 10.0
    RENDERED_FETCH_TIMEOUT_SECONDS: float = 120.0
    NETWORK_IDLE_TIMEOUT_SECONDS: float = 5.0
    BROWSER_HEADLESS: bool = True
    USER_AGENTS: List[str] = Field(default_factory=lambda: [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    ])


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
