"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./armaso_pos.db"
    database_echo: bool = False

    # Security / session
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    session_cookie_name: str = "armaso_session"
    session_max_age_days: int = 7

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Business day boundaries and weekday labels for analytics
    timezone: str = "Asia/Jakarta"
    locale: Literal["id", "en"] = "id"

    # "current": item revenue uses today's menu price (historical behaviour)
    # "sale": item revenue uses the price captured on the order line
    analytics_price_basis: Literal["current", "sale"] = "current"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Rate limiting
    rate_limit_enabled: bool = True

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if v == DEFAULT_SECRET_KEY or len(v) < 32:
            import warnings
            warnings.warn(
                "SECRET_KEY is the default or shorter than 32 characters; "
                "session cookies can be forged. Set SECRET_KEY.",
                UserWarning,
                stacklevel=2,
            )
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Refuse to start in production mode with an insecure secret."""
        if not self.debug and (self.secret_key == DEFAULT_SECRET_KEY or len(self.secret_key) < 32):
            raise ValueError(
                "FATAL: Cannot start in production mode without a secure SECRET_KEY "
                "(minimum 32 characters). Generate one with: "
                "python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
