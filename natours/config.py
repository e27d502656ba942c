"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# config.py is in natours/, the .env file lives next to it
_CONFIG_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_CONFIG_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Natours", description="Application name")
    app_env: str = Field(default="development", description="Application environment")

    # Security
    secret_key: str = Field(
        ...,
        description="Secret key for JWT tokens",
        alias="SECRET_KEY",
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_expires_in_days: int = Field(default=90, description="Access token lifetime in days")
    jwt_cookie_expires_in_days: int = Field(default=90, description="Lifetime of the jwt cookie in days")
    password_reset_expires_minutes: int = Field(
        default=10,
        description="How long a password reset token stays valid",
    )

    # Database
    database_url: str = Field(
        ...,
        description="SQLAlchemy database connection URL",
        alias="DATABASE_URL",
    )

    # Admission control
    rate_limit_max_requests: int = Field(default=100, description="Requests allowed per client per window")
    rate_limit_window_seconds: int = Field(default=60 * 60, description="Rate limit window length")
    max_body_bytes: int = Field(default=10 * 1024, description="Largest accepted request body")

    # Email
    email_host: str | None = Field(default=None, alias="EMAIL_HOST")
    email_port: int = Field(default=587, alias="EMAIL_PORT")
    email_username: str | None = Field(default=None, alias="EMAIL_USERNAME")
    email_password: str | None = Field(default=None, alias="EMAIL_PASSWORD")
    email_from: str = Field(default="Natours <hello@natours.io>", alias="EMAIL_FROM")

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str:
        """Validate and normalize database URL."""
        if v is None or v == "":
            raise ValueError("DATABASE_URL is required")
        return v.strip()

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_app_env(cls, v: str) -> str:
        """Normalize app environment to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("app_name", mode="before")
    @classmethod
    def normalize_app_name(cls, v: str) -> str:
        """Normalize app name by stripping whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings: Application settings instance

    Example:
        ```python
        from natours.config import get_settings

        settings = get_settings()
        print(settings.database_url)
        ```
    """
    return Settings()


# Global settings instance
settings = get_settings()
