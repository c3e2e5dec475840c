"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Garden Boutique Hotel API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")
    sqlite_busy_timeout: float = Field(15.0, alias="SQLITE_BUSY_TIMEOUT")

    secret_key: str = Field("change-me", alias="SECRET_KEY")
    jwt_secret_key: str = Field(default="", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    admin_email: str = Field("admin@gardenboutiquehotel.com", alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")
    admin_name: str = Field("Admin User", alias="ADMIN_NAME")

    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    booking_retry_attempts: int = Field(3, alias="BOOKING_RETRY_ATTEMPTS")
    booking_number_prefix: str = Field("BK", alias="BOOKING_NUMBER_PREFIX")

    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allowlist: str = Field("http://localhost:3000", alias="CORS_ALLOWLIST")

    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_login: str = Field("10/minute", alias="RATE_LIMIT_LOGIN")
    rate_limit_enabled: bool = Field(True, alias="RATE_LIMIT_ENABLED")
    rate_limit_guest: str = Field("20/minute", alias="RATE_LIMIT_GUEST")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    def model_post_init(self, __context: Any) -> None:
        """Populate JWT secret from the generic secret when not provided."""

        if not self.jwt_secret_key:
            object.__setattr__(self, "jwt_secret_key", self.secret_key)

    @property
    def cors_origins(self) -> list[str]:
        """Comma separated ``CORS_ALLOWLIST`` as a list."""
        return [origin.strip() for origin in self.cors_allowlist.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
