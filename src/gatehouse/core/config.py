"""Configuration management for Gatehouse.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production-use-gatehouse-generate-secret"


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GATEHOUSE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "Gatehouse"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public frontend URL used to build links in emails",
    )

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/gatehouse.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Settings
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Secret key for JWT access token signing",
    )
    jwt_issuer: str = "gatehouse"
    jwt_audience: str = "gatehouse-clients"
    access_token_expire_minutes: int = Field(default=15, gt=0)
    refresh_token_expire_days: int = Field(default=7, gt=0)
    email_verification_token_expire_minutes: int = Field(default=24 * 60, gt=0)
    password_reset_token_expire_minutes: int = Field(default=60, gt=0)

    # Lockout Settings
    max_login_attempts: int = Field(default=5, gt=0)
    lock_duration_minutes: int = Field(default=15, gt=0)

    # Mail Settings
    mail_backend: Literal["console", "smtp"] = "console"
    mail_from_email: str = "noreply@example.com"
    mail_from_name: str = "No Reply"
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = False
    smtp_use_ssl: bool = False
    smtp_timeout: int = 10

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Refuse to run production with the placeholder signing secret."""
        if self.is_production and self.secret_key == DEFAULT_SECRET_KEY:
            raise ValueError(
                "GATEHOUSE_SECRET_KEY must be set in production. "
                "Run 'gatehouse generate-secret' to create one."
            )
        return self

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self


@dataclass(frozen=True)
class AuthConfig:
    """Immutable authentication parameters.

    Built once at startup and handed to the auth service and token issuer,
    so tests can construct isolated instances with their own lockout and
    expiry values.
    """

    secret_key: str
    issuer: str = "gatehouse"
    audience: str = "gatehouse-clients"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    email_verification_token_expire_minutes: int = 24 * 60
    password_reset_token_expire_minutes: int = 60
    max_login_attempts: int = 5
    lock_duration_minutes: int = 15
    app_url: str = "http://localhost:3000"

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthConfig":
        """Build the auth configuration from application settings."""
        return cls(
            secret_key=settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            access_token_expire_minutes=settings.access_token_expire_minutes,
            refresh_token_expire_days=settings.refresh_token_expire_days,
            email_verification_token_expire_minutes=settings.email_verification_token_expire_minutes,
            password_reset_token_expire_minutes=settings.password_reset_token_expire_minutes,
            max_login_attempts=settings.max_login_attempts,
            lock_duration_minutes=settings.lock_duration_minutes,
            app_url=settings.app_url,
        )

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=self.refresh_token_expire_days)

    @property
    def email_verification_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.email_verification_token_expire_minutes)

    @property
    def password_reset_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.password_reset_token_expire_minutes)

    @property
    def lock_duration(self) -> timedelta:
        return timedelta(minutes=self.lock_duration_minutes)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()


@lru_cache
def get_auth_config() -> AuthConfig:
    """Get the cached authentication configuration derived from settings."""
    return AuthConfig.from_settings(get_settings())
