"""
Application configuration using environment variables.
"""
import secrets
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "SocialNet API"
    debug: bool = False
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000

    # Database
    database_url: str = "sqlite:///./socialnet.db"
    db_connect_retries: int = 5
    db_connect_retry_delay: float = 5.0  # seconds

    # Tokens - access and refresh tokens are signed with different keys
    access_token_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    refresh_token_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60  # 1 hour
    refreshed_access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Passwords
    bcrypt_rounds: int = 10
    max_failed_logins: int = 5
    lockout_minutes: int = 15

    # Cookies
    refresh_cookie_name: str = "refreshToken"
    cookie_secure: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate limiting
    register_rate_limit: str = "3/minute"
    login_rate_limit: str = "5/minute"
    refresh_rate_limit: str = "10/minute"

    def check_secrets(self) -> None:
        """Refuse to run with generated or shared token secrets in production."""
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        if self.environment != "production":
            return
        missing = [
            name.upper()
            for name in ("access_token_secret", "refresh_token_secret")
            if name not in self.model_fields_set
        ]
        if missing:
            raise ValueError(
                f"{', '.join(missing)} must be set in production! "
                "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
