# app/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL",
    )

    # Authentication
    ADMIN_API_KEY: str = Field(
        ...,
        description="API key for admin endpoints",
    )

    # Object storage (Cloudinary)
    CLOUDINARY_CLOUD_NAME: str | None = Field(
        default=None,
        description="Cloudinary cloud name",
    )
    CLOUDINARY_API_KEY: str | None = Field(
        default=None,
        description="Cloudinary API key",
    )
    CLOUDINARY_API_SECRET: str | None = Field(
        default=None,
        description="Cloudinary API secret (used for signed and private download URLs)",
    )
    STORAGE_FOLDER: str = Field(
        default="service-documents",
        description="Folder that uploaded service documents are stored under",
    )
    PRIVATE_DOWNLOAD_TTL_SECONDS: int = Field(
        default=600,
        ge=60,
        description="Lifetime of time-limited private download URLs",
    )

    # Document retrieval / streaming
    FETCH_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each storage candidate request",
    )
    STREAM_CHUNK_SIZE: int = Field(
        default=64 * 1024,
        ge=1024,
        le=1024 * 1024,
        description="Chunk size in bytes used when proxying document bodies",
    )

    # Cleanup
    CLEANUP_MAX_WORKERS: int = Field(
        default=8,
        ge=1,
        le=32,
        description="Parallel workers for best-effort storage cleanup",
    )

    # Service intake
    SERVICE_OWNER_ID: str | None = Field(
        default=None,
        description="Admin that receives service requests submitted through the public intake",
    )

    # Email Notifications
    RESEND_API_KEY: str | None = Field(
        default=None,
        description="Resend API key for review notification emails",
    )
    EMAIL_FROM: str = Field(
        default="Service Reviews <reviews@example.com>",
        description="From address for review notification emails",
    )
    EMAIL_ENABLED: bool = Field(
        default=True,
        description="Enable review notification emails",
    )

    # CORS
    CORS_ORIGINS: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (disable for local development)",
    )

    @field_validator(
        "CLOUDINARY_CLOUD_NAME",
        "CLOUDINARY_API_KEY",
        "CLOUDINARY_API_SECRET",
        "SERVICE_OWNER_ID",
        "RESEND_API_KEY",
    )
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat whitespace-only values as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
