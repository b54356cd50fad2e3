"""
Configuration management using pydantic-settings.

Loads configuration from SHARDSTORE_* environment variables and .env files.
Validates values and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storage settings loaded from environment variables.

    Optional:
        SHARDSTORE_STORAGE_ROOT: Directory holding metadata.db and the blob shards
        SHARDSTORE_REFERENCE_BYTES: Random bytes per reference (hex doubles the length)
        SHARDSTORE_REFERENCE_ATTEMPTS: References drawn before giving up on a collision
        SHARDSTORE_ESCAPE_WILDCARDS: Treat % and _ in name patterns literally
        SHARDSTORE_PRUNE_EMPTY_SHARDS: Remove empty shard directories after deletes
        SHARDSTORE_SQLITE_TIMEOUT: Seconds to wait on a locked catalog database
        SHARDSTORE_LOG_LEVEL: Logging level
        SHARDSTORE_LOG_FILE: JSON-lines log file
        SHARDSTORE_LOG_CONSOLE: Rich console output on stderr
    """

    model_config = SettingsConfigDict(
        env_prefix="SHARDSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage layout
    STORAGE_ROOT: Path = Field(
        default=Path(".shardstore"), description="Storage root directory"
    )
    REFERENCE_BYTES: int = Field(
        default=24,
        ge=3,
        le=128,
        description="Random bytes per reference; at least 3 to fill the shard path",
    )
    REFERENCE_ATTEMPTS: int = Field(
        default=4, ge=1, le=64, description="Reference draws before a collision is fatal"
    )

    # Behaviour
    ESCAPE_WILDCARDS: bool = Field(
        default=False, description="Escape LIKE wildcards in prefix/postfix"
    )
    PRUNE_EMPTY_SHARDS: bool = Field(
        default=True, description="Remove empty shard directories after blob removal"
    )
    SQLITE_TIMEOUT: float = Field(
        default=30.0, gt=0.0, description="SQLite busy timeout in seconds"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON-lines log file")
    LOG_CONSOLE: bool = Field(default=False, description="Rich console output on stderr")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def storage_root(self) -> Path:
        """Get storage root (lowercase alias)."""
        return self.STORAGE_ROOT

    @property
    def metadata_db_path(self) -> Path:
        """Path of the catalog database under the storage root."""
        return self.STORAGE_ROOT / "metadata.db"

    def display(self) -> dict[str, str | int | float | bool | None]:
        """Return settings as plain values for display."""
        return {
            "STORAGE_ROOT": str(self.STORAGE_ROOT),
            "REFERENCE_BYTES": self.REFERENCE_BYTES,
            "REFERENCE_ATTEMPTS": self.REFERENCE_ATTEMPTS,
            "ESCAPE_WILDCARDS": self.ESCAPE_WILDCARDS,
            "PRUNE_EMPTY_SHARDS": self.PRUNE_EMPTY_SHARDS,
            "SQLITE_TIMEOUT": self.SQLITE_TIMEOUT,
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
            "LOG_CONSOLE": self.LOG_CONSOLE,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
