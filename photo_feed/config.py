"""
Application configuration using Pydantic Settings.
Manages all environment variables and settings.
"""
from enum import Enum
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./photo_feed.db"


class Environment(str, Enum):
    """Application environment modes."""
    DEV = "DEV"
    PRODUCTION = "PRODUCTION"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Field(
        default=Environment.DEV,
        description="Application environment: DEV or PRODUCTION"
    )

    # Application
    app_name: str = Field(default="Photo Feed API")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    @model_validator(mode='after')
    def set_debug_from_environment(self):
        """Set debug mode based on environment if not explicitly set via environment variable."""
        import os
        if 'DEBUG' not in os.environ:
            self.debug = self.environment == Environment.DEV
        return self

    # Database (빈 문자열이면 로컬 SQLite 사용)
    database_url: str = Field(default=DEFAULT_DATABASE_URL)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800)

    @field_validator("database_url", mode="before")
    @classmethod
    def coerce_empty_database_url(cls, v: str) -> str:
        if not v or not str(v).strip():
            return DEFAULT_DATABASE_URL
        return v

    # File store: <upload_dir>/<fieldname>/<generated-name>, served at /uploads
    upload_dir: str = Field(default="./uploads")
    max_upload_size_mb: int = Field(default=10)

    # Signup avatar. {initial} is the first character of the username.
    avatar_placeholder_url: str = Field(
        default="https://placehold.co/192x192/EFEFEF/3A3A3A?text={initial}"
    )

    # bcrypt cost factor for password and recovery-answer hashes (4..31)
    password_hash_rounds: int = Field(default=12, ge=4, le=31)

    # CORS
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Rate limiting (slowapi)
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_per_minute: int = Field(default=120)
    recover_rate_limit: str = Field(
        default="5/minute",
        description="Limit for /api/login/recover per client (brute-force guard)",
    )

    # Logging. 비우면 파일 로그 비활성화 (stdout/stderr만 사용)
    log_dir: str = Field(default="")
    instance_ip: str = Field(default="", description="서버 사설 IP (비우면 hostname 사용)")

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Using lru_cache to avoid reading .env file on every request.
    """
    return Settings()
