"""Application settings using Pydantic Settings for typed configuration.

This module centralizes all configuration and provides type-safe access to settings.
Settings are loaded from environment variables with sensible defaults.
"""

import re
from datetime import timedelta
from functools import lru_cache

from limits import parse_many
from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int) -> timedelta:
    """Parse a duration such as ``15m``, ``7d``, ``3600`` or ``12h``.

    Bare numbers are interpreted as seconds.
    """
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env_name: str = Field(default="development", alias="ENV_NAME")

    # Database
    database_url: str = Field(alias="DATABASE_URL")

    # Admin panel
    session_secret_key: str = Field(alias="SESSION_SECRET_KEY")

    # CORS
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # JWT
    jwt_secret: str = Field(alias="JWT_SECRET", min_length=32)
    jwt_refresh_secret: str = Field(alias="JWT_REFRESH_SECRET", min_length=32)
    jwt_access_expiration: str = Field(default="15m", alias="JWT_ACCESS_EXPIRATION")
    jwt_refresh_expiration: str = Field(default="7d", alias="JWT_REFRESH_EXPIRATION")

    # Passwords
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS", ge=12, le=16)
    password_reset_expiry_hours: int = Field(
        default=3, alias="PASSWORD_RESET_EXPIRY_HOURS", ge=1, le=72
    )

    # Email (Resend)
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    app_domain: str = Field(default="resend.dev", alias="APP_DOMAIN")
    client_url: str = Field(default="http://localhost:3000", alias="CLIENT_URL")

    # Rate limiting, per client address
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_storage_uri: str = Field(
        default="memory://", alias="RATE_LIMIT_STORAGE_URI"
    )
    throttle_short_limit: int = Field(default=10, alias="THROTTLE_SHORT_LIMIT", ge=1)
    throttle_medium_limit: int = Field(default=20, alias="THROTTLE_MEDIUM_LIMIT", ge=1)
    throttle_long_limit: int = Field(default=100, alias="THROTTLE_LONG_LIMIT", ge=1)
    rate_limit_register: str = Field(default="3/minute", alias="RATE_LIMIT_REGISTER")
    rate_limit_login: str = Field(default="5/minute", alias="RATE_LIMIT_LOGIN")
    rate_limit_refresh: str = Field(default="10/minute", alias="RATE_LIMIT_REFRESH")
    rate_limit_forgot_password: str = Field(
        default="3/minute", alias="RATE_LIMIT_FORGOT_PASSWORD"
    )
    rate_limit_reset_password: str = Field(
        default="5/minute", alias="RATE_LIMIT_RESET_PASSWORD"
    )

    @field_validator("jwt_access_expiration", "jwt_refresh_expiration")
    @classmethod
    def _validate_duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator(
        "rate_limit_register",
        "rate_limit_login",
        "rate_limit_refresh",
        "rate_limit_forgot_password",
        "rate_limit_reset_password",
    )
    @classmethod
    def _validate_rate_limit(cls, value: str) -> str:
        # slowapi skips unparsable dynamic limits with only a log line
        parse_many(value)
        return value

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        origins = []
        for o in self.cors_origins.split(","):
            trimmed = o.strip()
            if trimmed:
                origins.append(trimmed)
        return origins

    @computed_field
    @property
    def access_token_ttl(self) -> timedelta:
        """Lifetime of an access token."""
        return parse_duration(self.jwt_access_expiration)

    @computed_field
    @property
    def refresh_token_ttl(self) -> timedelta:
        """Lifetime of a refresh token."""
        return parse_duration(self.jwt_refresh_expiration)

    @computed_field
    @property
    def password_reset_ttl(self) -> timedelta:
        """Lifetime of a password reset token."""
        return timedelta(hours=self.password_reset_expiry_hours)

    @computed_field
    @property
    def global_rate_limits(self) -> str:
        """Application-wide limits in slowapi notation."""
        return (
            f"{self.throttle_short_limit}/second;"
            f"{self.throttle_medium_limit}/10 seconds;"
            f"{self.throttle_long_limit}/minute"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
