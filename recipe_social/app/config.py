from __future__ import annotations

from typing import Literal, Optional

from pydantic import AnyUrl, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Only for local runs and tests; rejected when APP_ENV=production
DEV_JWT_SECRET = "dev-secret-change-me-please-32bytes"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    APP_ENV: str = "local"
    STORAGE_BACKEND: Literal["supabase", "memory"] = "memory"

    SUPABASE_URL: Optional[AnyUrl] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    JWT_SECRET: str = DEV_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = Field(default=60, ge=1)

    FEED_DEFAULT_LIMIT: int = Field(default=10, ge=1)
    FEED_MAX_LIMIT: int = Field(default=50, ge=1)

    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
    )

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @model_validator(mode="after")
    def require_real_jwt_secret(self) -> "Settings":
        if self.is_production and self.JWT_SECRET == DEV_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set when APP_ENV=production")
        return self


settings = Settings()
