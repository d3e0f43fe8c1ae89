from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    # allow both comma and whitespace separated
    parts = [p.strip() for p in value.replace("\n", ",").replace(" ", ",").split(",")]
    return [p for p in parts if p]

class Settings(BaseSettings):
    # App meta
    APP_NAME: str = "Status Report Backend"
    ENV: str = "production"
    VERSION: str = "2026.10"
    DEBUG: bool = False
    DEFAULT_LANGUAGE: str = "de"

    # Networking / CORS (comma separated)
    CORS_ALLOW_ORIGINS: str = ""

    # Auth / Admin
    ADMIN_TOKEN: Optional[str] = None
    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

settings = Settings()

def allowed_origins() -> list[str]:
    return _split_csv(settings.CORS_ALLOW_ORIGINS)
