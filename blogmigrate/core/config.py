"""
Configuration management using Pydantic settings.
"""
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CREDENTIALS_RE = re.compile(r"//[^/@]*@")


class Settings(BaseSettings):
    """Settings for the migration engine, read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Store connection strings
    blog_source_db_uri: Optional[str] = Field(
        default=None, description="Connection URL of the store blogs are migrated from"
    )
    database_url: Optional[str] = Field(
        default=None, description="Connection URL of the store blogs are migrated into"
    )
    database_echo: bool = Field(default=False)

    # Backups and reports
    migration_backup_dir: str = Field(default="./migration-backups")

    # Runtime
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="./logs")

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v):
        return (v or "development").strip().lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        return (v or "INFO").strip().upper()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def backup_dir(self) -> Path:
        return Path(self.migration_backup_dir)

    def require_store_uris(self) -> tuple[str, str]:
        """
        Return the source and target URLs.

        Raises:
            ValueError: If either URL is not configured
        """
        if not self.blog_source_db_uri:
            raise ValueError("BLOG_SOURCE_DB_URI environment variable is required")
        if not self.database_url:
            raise ValueError("DATABASE_URL environment variable is required")
        return self.blog_source_db_uri, self.database_url


def mask_credentials(uri: Optional[str]) -> str:
    """Hide the user/password part of a connection URL."""
    if not uri:
        return ""
    return _CREDENTIALS_RE.sub("//***@", uri)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
