from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "Scriptorium"
    env: str = "development"
    debug: bool = True
    port: int = 8000
    secret_key: Optional[str] = None
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"


class DatabaseConfig(BaseModel):
    """Database configuration values."""

    # Default to docker-compose service credentials
    url: str = "postgresql+psycopg://user:password@db:5432/scriptorium"
    echo: bool = False


class BoostConfig(BaseModel):
    """Per-field score multipliers applied at index time."""

    title: float = 3.0
    author: float = 2.0
    section: float = 1.5
    text: float = 1.0


class SearchConfig(BaseModel):
    """Search index and query configuration values."""

    # Snapshot schema identifier; exactly one snapshot is kept per version
    version: str = "1.0"
    boosts: BoostConfig = BoostConfig()
    paragraph_limit: int = 10000
    rebuild_debounce_seconds: float = 3.0
    result_limit: int = 50
    fragment_length: int = 200
    suggestion_limit: int = 5


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTORIUM_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    database: DatabaseConfig = DatabaseConfig()
    search: SearchConfig = SearchConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
