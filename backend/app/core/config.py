# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Annotated, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import BRAND_NAME

logger = logging.getLogger(__name__)

_BACKEND_ROOT = Path(__file__).resolve().parents[2]

# CI injects its environment directly; locally pick up backend/.env
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path)

_PLACEHOLDER_SECRETS = {"change-me", "changeme", "secret", "dev-secret"}


class Settings(BaseSettings):
    """Runtime configuration loaded from the environment."""

    app_name: str = Field(default=f"{BRAND_NAME.lower()}-api")
    environment: str = Field(default="development", description="development|test|production")
    is_testing: bool = Field(default=False)
    debug: bool = Field(default=False, description="DEBUG level logging")

    # Tokens
    secret_key: SecretStr = Field(..., description="HMAC secret for access tokens")
    refresh_secret_key: SecretStr = Field(..., description="HMAC secret for refresh tokens")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=7 * 24 * 60, ge=1)
    refresh_token_expire_days: int = Field(default=30, ge=1)
    refresh_cookie_name: str = "refreshToken"

    # Storage
    database_url: str = Field(default="postgresql://localhost:5432/disciplix")
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    redis_url: str = Field(default="redis://localhost:6379")

    # Frontend
    client_url: str = Field(default="http://localhost:3000")

    # Email
    email_provider: Literal["console", "resend"] = "console"
    resend_api_key: Optional[str] = None
    email_from: str = Field(default="noreply@disciplix.ai")
    email_verification_ttl_hours: int = Field(default=24, ge=1)
    password_reset_ttl_minutes: int = Field(default=60, ge=1)

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable per-IP rate limiting")
    rate_limit_requests: int = Field(default=1000, ge=1)
    rate_limit_window_seconds: int = Field(default=15 * 60, ge=1)

    # Subscription tiers allowed to book trainer sessions
    booking_subscription_tiers: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["PREMIUM", "ELITE"]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, v: str) -> str:
        return str(v or "development").strip().lower()

    @field_validator("booking_subscription_tiers", mode="before")
    @classmethod
    def _split_tiers(cls, v):
        if isinstance(v, str):
            return [part.strip().upper() for part in v.split(",") if part.strip()]
        return [str(part).upper() for part in v]

    @model_validator(mode="after")
    def _validate_secrets(self) -> "Settings":
        access = self.secret_key.get_secret_value()
        refresh = self.refresh_secret_key.get_secret_value()
        if not access or not refresh:
            raise ValueError("SECRET_KEY and REFRESH_SECRET_KEY must be set")
        if access == refresh:
            raise ValueError("REFRESH_SECRET_KEY must differ from SECRET_KEY")
        if self.is_production and (
            access.lower() in _PLACEHOLDER_SECRETS or refresh.lower() in _PLACEHOLDER_SECRETS
        ):
            raise ValueError("Placeholder secrets are not allowed in production")
        if self.email_provider == "resend" and not self.resend_api_key:
            logger.warning("EMAIL_PROVIDER is resend but RESEND_API_KEY is not configured")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
