"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Runtime settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="SF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8080, gt=0, lt=65536, description="HTTP port")

    # Persistence
    database_path: str = Field(
        default="", description="SQLite document store path (empty = in-memory store)"
    )

    # Commerce collaborators (cart, discounts, forms)
    commerce_url: str = Field(default="http://localhost:8000", description="Commerce API base URL")
    commerce_timeout: float = Field(default=5.0, gt=0, description="Commerce request timeout")
    breaker_fail_max: int = Field(default=5, gt=0, description="Failures before breaker opens")
    breaker_reset_timeout: int = Field(default=30, gt=0, description="Breaker reset (seconds)")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Style compilation
    style_cache_size: int = Field(default=512, gt=0, description="Compiled style cache entries")

    # Document limits
    max_tree_size: int = Field(default=512 * 1024, gt=0, description="Max encoded tree bytes")
    max_tree_depth: int = Field(default=64, gt=0, description="Max tree JSON nesting depth")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
