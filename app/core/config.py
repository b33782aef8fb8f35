"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, session secret, upload limits, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pathlib import Path
from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


DEFAULT_SESSION_SECRET = "dev-secret-change-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB (unset = degraded in-memory mode)
    MONGODB_URL: Optional[str] = Field(
        default=None,
        description="MongoDB connection URI; leave unset to run on in-memory storage"
    )
    MONGODB_DB_NAME: str = Field(
        default="docportal",
        description="MongoDB database name"
    )
    GRIDFS_BUCKET_NAME: str = Field(
        default="document_files",
        description="GridFS bucket holding PDF content"
    )

    # Sessions
    SESSION_SECRET: str = Field(
        default=DEFAULT_SESSION_SECRET,
        description="Secret used to sign session cookies"
    )
    SESSION_COOKIE_NAME: str = Field(
        default="docportal_session",
        description="Session cookie name"
    )
    SESSION_MAX_AGE_DAYS: int = Field(
        default=7,
        description="Session cookie lifetime in days"
    )

    # Uploads
    UPLOAD_TMP_DIR: Path = Field(
        default=Path("uploads"),
        description="Directory where received files wait for validation"
    )
    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        description="Maximum size of a single uploaded PDF in megabytes"
    )
    MAX_BATCH_FILES: int = Field(
        default=50,
        description="Maximum number of files accepted by one batch upload"
    )

    # Bootstrap admin
    ADMIN_PHONE_NUMBER: Optional[str] = Field(
        default=None,
        description="Phone number of the admin created on first startup"
    )
    ADMIN_PASSWORD: Optional[str] = Field(
        default=None,
        description="Password of the bootstrap admin"
    )
    ADMIN_NAME: Optional[str] = Field(
        default=None,
        description="Display name of the bootstrap admin"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("SESSION_SECRET")
    @classmethod
    def validate_session_secret(cls, v: str, info: ValidationInfo) -> str:
        """Ensure session secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == DEFAULT_SESSION_SECRET:
            raise ValueError("SESSION_SECRET must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_MAX_AGE_DAYS * 24 * 60 * 60


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if settings.MAX_UPLOAD_SIZE_MB <= 0:
        errors.append("MAX_UPLOAD_SIZE_MB must be positive")

    if settings.MAX_BATCH_FILES <= 0:
        errors.append("MAX_BATCH_FILES must be positive")

    # Bootstrap admin needs both halves
    if bool(settings.ADMIN_PHONE_NUMBER) != bool(settings.ADMIN_PASSWORD):
        errors.append("ADMIN_PHONE_NUMBER and ADMIN_PASSWORD must be set together")

    # Production-specific validations
    if settings.is_production:
        if settings.SESSION_SECRET == DEFAULT_SESSION_SECRET:
            errors.append("SESSION_SECRET is required in production")
        if not settings.MONGODB_URL:
            errors.append("MONGODB_URL is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
