"""
Application settings with validation using pydantic-settings.
Validates environment variables at startup.
"""
from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database configuration
    DATABASE_URL: Optional[str] = Field(default=None, description="Full SQLAlchemy URL (overrides DB_* fields)")
    DB_USER: str = Field(default="postgres", description="PostgreSQL username")
    DB_PASSWORD: str = Field(default="", description="PostgreSQL password")
    DB_NAME: str = Field(default="flowerdesk", description="PostgreSQL database name")
    DB_HOST: str = Field(default="localhost", description="PostgreSQL host")
    DB_PORT: str = Field(default="5432", description="PostgreSQL port")

    # Database pool configuration
    DB_POOL_SIZE: int = Field(default=10, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database max overflow connections")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database connection recycle time (seconds)")

    # CORS configuration
    ALLOWED_ORIGINS: str = Field(default="", description="Comma-separated list of allowed CORS origins")

    # Environment
    ENVIRONMENT: str = Field(default="development", description="Environment: development or production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Shop behaviour
    STRICT_STOCK_CHECK: bool = Field(
        default=False,
        description="Reject orders and bouquets that need more flowers than the warehouse holds",
    )
    PHOTO_MAX_SIDE_PX: int = Field(default=600, ge=16, description="Longest side of stored bouquet photos")
    PHOTO_QUALITY: int = Field(default=80, ge=1, le=100, description="WebP quality of stored bouquet photos")
    SEED_ON_STARTUP: bool = Field(default=False, description="Insert sample flowers and notes into an empty database")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        if v not in ("development", "production"):
            raise ValueError("ENVIRONMENT must be 'development' or 'production'")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    def validate_production_settings(self) -> list[str]:
        """
        Validate that all required settings are present in production.
        Returns list of problems.
        """
        errors = []

        if self.ENVIRONMENT == "production":
            if not self.DATABASE_URL and not self.DB_PASSWORD:
                errors.append("DB_PASSWORD (or DATABASE_URL) is required in production")
            if not self.ALLOWED_ORIGINS:
                errors.append("ALLOWED_ORIGINS is required in production")

        return errors

    @property
    def db_url(self) -> str:
        """Async database URL used by the application engine."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Hosting providers hand out plain postgres:// URLs
            if url.startswith("postgres://"):
                url = "postgresql://" + url[len("postgres://"):]
            if url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url
        password = quote_plus(self.DB_PASSWORD)
        return f"postgresql+asyncpg://{self.DB_USER}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def sync_db_url(self) -> str:
        """Synchronous (psycopg2) URL for alembic migrations."""
        return self.db_url.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get list of allowed CORS origins."""
        if not self.ALLOWED_ORIGINS:
            return []
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
        errors = _settings.validate_production_settings()
        if errors:
            error_msg = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_msg)
    return _settings
